"""Utility helpers for clawbridge."""
