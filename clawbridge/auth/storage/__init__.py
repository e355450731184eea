"""Credential stores for the Claude CLI source and the Clawdbot target."""

from .base import JsonCredentialStore
from .claude import ClaudeTokenStorage
from .clawdbot import ClawdbotOAuthStorage


__all__ = [
    "JsonCredentialStore",
    "ClaudeTokenStorage",
    "ClawdbotOAuthStorage",
]
