"""Clients for the two upstream platforms: Chatwoot and OneUptime."""
from .base import ApiError, ConfigurationError, IntegrationError
from .chatwoot import ChatwootClient
from .hook_settings import HookSettingsProvider, StaticOneUptimeConfig
from .oneuptime import OneUptimeClient

__all__ = [
    "ApiError",
    "ConfigurationError",
    "IntegrationError",
    "ChatwootClient",
    "HookSettingsProvider",
    "StaticOneUptimeConfig",
    "OneUptimeClient",
]
