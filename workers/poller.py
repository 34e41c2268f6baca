"""Periodic sync of OneUptime incident state back into linked Chatwoot conversations."""
import asyncio
from typing import Optional
from core.logging import get_logger
from escalation import notes
from escalation.matching import is_resolved_name
from integrations.base import IntegrationError
from integrations.chatwoot import ChatwootClient
from integrations.oneuptime import OneUptimeClient
from workers.tracker import Link, LinkTracker

logger = get_logger(__name__)


class IncidentPoller:
    """Polls every tracked incident and reports each state transition once."""

    def __init__(
        self,
        tracker: LinkTracker,
        chatwoot: ChatwootClient,
        oneuptime: OneUptimeClient,
        interval_seconds: float = 30.0
    ):
        """
        Initialize poller.

        Args:
            tracker: Link registry populated by the orchestrator
            chatwoot: Conversation service for notes and attributes
            oneuptime: Incident service for current state
            interval_seconds: Delay between the end of one tick and the start of the next
        """
        self.tracker = tracker
        self.chatwoot = chatwoot
        self.oneuptime = oneuptime
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> int:
        """
        Run a single tick over a snapshot of the tracker.

        Returns:
            Number of state transitions propagated
        """
        if self.tracker.size() == 0:
            return 0

        transitions = 0
        for incident_id, link in self.tracker.entries():
            try:
                if await self._check(incident_id, link):
                    transitions += 1
            except Exception as e:
                logger.error("Error checking incident", incident_id=incident_id, error=str(e))
        return transitions

    async def _check(self, incident_id: str, link: Link) -> bool:
        incident = await self.oneuptime.get_incident(incident_id)
        new_state_id = incident.current_state_id
        if not new_state_id or new_state_id == link.last_known_state_id:
            return False

        old_name = link.state_name(link.last_known_state_id)
        new_name = link.state_name(new_state_id)
        incident_url = await self.oneuptime.incident_url(incident_id)

        results = await asyncio.gather(
            self.chatwoot.update_custom_attributes(
                link.conversation_id,
                {"oneuptime_incident_status": new_name}
            ),
            self.chatwoot.send_message(
                link.conversation_id,
                notes.status_changed(old_name, new_name, incident_url)
            ),
            return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, Exception)]
        for action, result in zip(("update_custom_attributes", "send_message"), results):
            if isinstance(result, Exception):
                logger.error(
                    "Failed to push incident status to conversation",
                    action=action,
                    incident_id=incident_id,
                    conversation_id=link.conversation_id,
                    error=str(result)
                )
        # Nothing reached the conversation: leave the state unadvanced so the next tick retries.
        if len(failures) == len(results):
            raise IntegrationError(
                f"Incident {incident_id} status change not delivered to conversation {link.conversation_id}"
            ) from failures[0]

        self.tracker.update_state(incident_id, new_state_id)
        logger.info(
            "Incident state changed",
            incident_id=incident_id,
            old_state=old_name,
            new_state=new_name
        )

        # Only names from the creation-time snapshot count; an unmapped id is never resolved.
        if is_resolved_name(link.state_map.get(new_state_id)):
            logger.info("Incident resolved, untracking", incident_id=incident_id)
            self.tracker.untrack(incident_id)

        return True

    async def _run(self) -> None:
        logger.info("Starting incident status poller", interval_seconds=self.interval_seconds)
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.poll_once()
            except Exception as e:
                logger.error("Incident poll tick failed", error=str(e))

    def start(self) -> None:
        """Start polling in the background; a second call is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Incident status poller stopped")
