import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from clawbridge.core.logging import get_logger

from .claude import ClaudeCLISettings
from .logging import LoggingSettings
from .oauth import OAuthSettings, PathSettings


__all__ = ["Settings", "ConfigurationError", "get_settings"]

ENV_PREFIX = "CLAWBRIDGE_"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class Settings(BaseSettings):
    """
    Configuration settings for clawbridge.

    Settings are loaded from environment variables (prefixed with CLAWBRIDGE_,
    nested with __), .env files, and an optional TOML configuration file.
    Environment variables take precedence over values from the TOML file.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    oauth: OAuthSettings = Field(
        default_factory=OAuthSettings,
        description="OAuth token refresh settings",
    )

    paths: PathSettings = Field(
        default_factory=PathSettings,
        description="Credential store locations",
    )

    claude_cli: ClaudeCLISettings = Field(
        default_factory=ClaudeCLISettings,
        description="Claude CLI runner settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(cls, config_path: Path | str | None = None) -> "Settings":
        """Create Settings from the environment and an optional TOML file."""
        if config_path is None:
            config_path_env = os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        try:
            settings = cls()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        if config_path is None:
            return settings

        if config_path.suffix.lower() != ".toml":
            raise ConfigurationError(
                f"Unsupported config file format: {config_path.suffix}. "
                "Only TOML (.toml) files are supported."
            )

        config_data = cls.load_toml_config(config_path)
        logger = get_logger(__name__)
        logger.info("config_file_loaded", path=str(config_path))

        env_keys = {key.upper() for key in os.environ}
        for section, values in config_data.items():
            current = getattr(settings, section, None)
            if not isinstance(current, BaseModel) or not isinstance(values, dict):
                logger.warning("config_unknown_section", section=section)
                continue

            merged = current.model_dump()
            for key, value in values.items():
                env_key = f"{ENV_PREFIX}{section.upper()}__{key.upper()}"
                if env_key not in env_keys:
                    merged[key] = value

            try:
                setattr(settings, section, type(current).model_validate(merged))
            except ValidationError as e:
                raise ConfigurationError(
                    f"Invalid [{section}] section in {config_path}: {e}"
                ) from e

        return settings


@lru_cache
def get_settings(config_path: Path | None = None) -> Settings:
    """Get cached settings, optionally loaded from a TOML file."""
    return Settings.from_config(config_path)
