"""Configuration package for clawbridge."""

from .settings import ConfigurationError, Settings, get_settings


__all__ = ["Settings", "ConfigurationError", "get_settings"]
