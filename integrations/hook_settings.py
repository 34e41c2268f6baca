"""OneUptime credential providers.

Credentials normally live in Chatwoot's OneUptime integration
(Settings > Integrations > OneUptime) and are read from there, cached and
periodically refreshed. A static provider covers deployments that pass them
through the environment instead.
"""
import asyncio
import time
from typing import Optional, Protocol
from pydantic import ValidationError
from core.logging import get_logger
from integrations.base import ConfigurationError
from integrations.chatwoot import ChatwootClient
from integrations.models import OneUptimeConfig

logger = get_logger(__name__)

ONEUPTIME_APP_ID = "oneuptime"


class OneUptimeConfigProvider(Protocol):
    async def get_config(self) -> OneUptimeConfig:
        ...


class StaticOneUptimeConfig:
    """Provider returning fixed credentials."""

    def __init__(self, base_url: str, project_id: str, api_key: str):
        self._config = OneUptimeConfig(base_url=base_url, project_id=project_id, api_key=api_key)

    async def get_config(self) -> OneUptimeConfig:
        return self._config


class HookSettingsProvider:
    """Reads OneUptime credentials from the Chatwoot integration hook, with caching."""

    def __init__(self, chatwoot: ChatwootClient, refresh_seconds: float = 300.0):
        """
        Initialize provider.

        Args:
            chatwoot: Chatwoot client used to read the integration hook
            refresh_seconds: How long a fetched config is served from cache
        """
        self.chatwoot = chatwoot
        self.refresh_seconds = refresh_seconds
        self._cached: Optional[OneUptimeConfig] = None
        self._last_fetch: float = 0.0
        self._refresh_task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    async def _fetch(self) -> OneUptimeConfig:
        hooks = await self.chatwoot.get_integration_hooks(ONEUPTIME_APP_ID)
        if not hooks:
            raise ConfigurationError(
                "OneUptime integration is not connected in Chatwoot. "
                "Go to Settings > Integrations > OneUptime and connect it first."
            )

        hook_settings = hooks[0].settings or {}
        if not all(hook_settings.get(key) for key in ("base_url", "project_id", "api_key")):
            raise ConfigurationError(
                "OneUptime hook settings are incomplete. "
                "Ensure base_url, project_id, and api_key are configured."
            )

        try:
            return OneUptimeConfig(
                base_url=str(hook_settings["base_url"]),
                project_id=str(hook_settings["project_id"]),
                api_key=str(hook_settings["api_key"]),
            )
        except ValidationError as e:
            raise ConfigurationError(f"OneUptime hook settings are invalid: {e}") from e

    async def get_config(self) -> OneUptimeConfig:
        """
        Return the OneUptime config, refreshing it when the cache has expired.

        A failed refresh keeps serving the previously cached config.

        Raises:
            IntegrationError: If nothing is cached and the fetch fails
        """
        if self._is_fresh():
            return self._cached

        async with self._lock:
            # Another caller may have refreshed while this one waited
            if self._is_fresh():
                return self._cached

            try:
                self._cached = await self._fetch()
                self._last_fetch = time.monotonic()
                logger.info(
                    "Loaded OneUptime config from Chatwoot",
                    project_id=self._cached.project_id,
                    base_url=self._cached.base_url
                )
            except Exception as e:
                if self._cached is None:
                    raise
                logger.warning("Failed to refresh OneUptime config, using cached config", error=str(e))

            return self._cached

    def _is_fresh(self) -> bool:
        return self._cached is not None and time.monotonic() - self._last_fetch < self.refresh_seconds

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_seconds)
            try:
                await self.get_config()
            except Exception as e:
                logger.error("OneUptime config auto-refresh failed", error=str(e))

    def start_auto_refresh(self) -> None:
        """Start refreshing the cached config in the background."""
        if self._refresh_task and not self._refresh_task.done():
            return
        self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def stop_auto_refresh(self) -> None:
        """Cancel the background refresh task."""
        if not self._refresh_task:
            return
        self._refresh_task.cancel()
        try:
            await self._refresh_task
        except asyncio.CancelledError:
            pass
        self._refresh_task = None
