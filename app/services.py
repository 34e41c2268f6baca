"""Construction and lifecycle of the long-lived objects shared by routes and workers."""
from dataclasses import dataclass
from core.config import Settings
from core.logging import get_logger
from escalation.orchestrator import IncidentOrchestrator
from integrations.chatwoot import ChatwootClient
from integrations.hook_settings import HookSettingsProvider, OneUptimeConfigProvider, StaticOneUptimeConfig
from integrations.oneuptime import OneUptimeClient
from workers.poller import IncidentPoller
from workers.tracker import LinkTracker

logger = get_logger(__name__)


@dataclass
class BridgeServices:
    """Everything the webhook route and the poller need, owned by the app lifespan."""
    chatwoot: ChatwootClient
    oneuptime: OneUptimeClient
    config_provider: OneUptimeConfigProvider
    tracker: LinkTracker
    orchestrator: IncidentOrchestrator
    poller: IncidentPoller

    async def start(self) -> None:
        """Load OneUptime credentials once, then start background workers."""
        try:
            await self.config_provider.get_config()
            logger.info("OneUptime credentials loaded")
        except Exception as e:
            logger.warning(
                "OneUptime not yet connected; /oncall commands will fail until it is configured "
                "in Chatwoot Settings > Integrations > OneUptime",
                error=str(e)
            )

        if isinstance(self.config_provider, HookSettingsProvider):
            self.config_provider.start_auto_refresh()
        self.poller.start()

    async def stop(self) -> None:
        await self.poller.stop()
        if isinstance(self.config_provider, HookSettingsProvider):
            await self.config_provider.stop_auto_refresh()
        await self.oneuptime.close()
        await self.chatwoot.close()


def build_services(settings: Settings) -> BridgeServices:
    """
    Wire clients, tracker, orchestrator and poller from settings.

    Args:
        settings: Application settings

    Returns:
        BridgeServices (not yet started)
    """
    chatwoot = ChatwootClient(
        base_url=settings.chatwoot_base_url,
        api_token=settings.get_secret_value(settings.chatwoot_api_token) or "",
        account_id=settings.chatwoot_account_id,
        timeout=settings.http_timeout_seconds
    )

    if settings.has_static_oneuptime_config:
        config_provider: OneUptimeConfigProvider = StaticOneUptimeConfig(
            base_url=settings.oneuptime_base_url,
            project_id=settings.oneuptime_project_id,
            api_key=settings.get_secret_value(settings.oneuptime_api_key)
        )
        logger.info("Using OneUptime credentials from environment")
    else:
        config_provider = HookSettingsProvider(chatwoot, refresh_seconds=settings.hook_refresh_seconds)
        logger.info("Using OneUptime credentials from Chatwoot integration settings")

    oneuptime = OneUptimeClient(config_provider, timeout=settings.http_timeout_seconds)
    tracker = LinkTracker()

    return BridgeServices(
        chatwoot=chatwoot,
        oneuptime=oneuptime,
        config_provider=config_provider,
        tracker=tracker,
        orchestrator=IncidentOrchestrator(chatwoot, oneuptime, tracker),
        poller=IncidentPoller(tracker, chatwoot, oneuptime, interval_seconds=settings.poll_interval_seconds),
    )
