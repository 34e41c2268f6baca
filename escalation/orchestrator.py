"""Incident creation flow triggered by an `/oncall` note."""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from core.logging import get_logger
from escalation import notes
from escalation.commands import IncidentRequest
from escalation.description import build_incident_description
from escalation.matching import find_created_state, match_policy, match_severity
from integrations.chatwoot import ChatwootClient
from integrations.oneuptime import OneUptimeClient
from workers.tracker import LinkTracker

logger = get_logger(__name__)


class CreationOutcome(str, Enum):
    """How a single `/oncall` request ended."""
    CREATED = "created"
    UNKNOWN_SEVERITY = "unknown_severity"
    UNKNOWN_TEAM = "unknown_team"
    MISSING_CREATED_STATE = "missing_created_state"
    FAILED = "failed"


@dataclass(frozen=True)
class OrchestrationResult:
    outcome: CreationOutcome
    incident_id: Optional[str] = None
    error: Optional[str] = None


def default_title(conversation_id: int | str, severity_name: str) -> str:
    return f"[Chatwoot #{conversation_id}] Support escalation - {severity_name}"


class IncidentOrchestrator:
    """Creates OneUptime incidents from Chatwoot conversations and links them for status sync."""

    def __init__(
        self,
        chatwoot: ChatwootClient,
        oneuptime: OneUptimeClient,
        tracker: LinkTracker
    ):
        """
        Initialize orchestrator.

        Args:
            chatwoot: Conversation service
            oneuptime: Incident service
            tracker: Link registry shared with the status poller
        """
        self.chatwoot = chatwoot
        self.oneuptime = oneuptime
        self.tracker = tracker

    async def handle_command(
        self,
        conversation_id: int | str,
        request: IncidentRequest
    ) -> OrchestrationResult:
        """
        Run `create_incident`, turning any failure into a note in the conversation.

        Never raises: it runs after the webhook has already been acknowledged,
        so there is no caller left to report to.
        """
        try:
            return await self.create_incident(conversation_id, request)
        except Exception as e:
            logger.error(
                "Failed to create incident",
                conversation_id=conversation_id,
                severity=request.severity,
                error=str(e)
            )
            try:
                await self.chatwoot.send_message(conversation_id, notes.integration_error(e))
            except Exception as notify_error:
                logger.error(
                    "Could not notify agent of failure",
                    conversation_id=conversation_id,
                    error=str(notify_error),
                    original_error=str(e)
                )
            return OrchestrationResult(CreationOutcome.FAILED, error=str(e))

    async def create_incident(
        self,
        conversation_id: int | str,
        request: IncidentRequest
    ) -> OrchestrationResult:
        """
        Create an incident for a conversation and start tracking it.

        Unknown severity/team and a misconfigured created state are reported
        in the conversation and returned as outcomes. Upstream failures raise.

        Args:
            conversation_id: Chatwoot conversation ID
            request: Parsed `/oncall` request

        Returns:
            OrchestrationResult
        """
        severities, states, policies, conversation = await asyncio.gather(
            self.oneuptime.list_severities(),
            self.oneuptime.list_states(),
            self.oneuptime.list_policies(),
            self.chatwoot.get_conversation(conversation_id),
        )

        severity = match_severity(severities, request.severity)
        if severity is None:
            logger.info("Unknown severity requested", conversation_id=conversation_id, severity=request.severity)
            await self.chatwoot.send_message(
                conversation_id,
                notes.unknown_severity(request.severity, [s.name for s in severities])
            )
            return OrchestrationResult(CreationOutcome.UNKNOWN_SEVERITY)

        created_state = find_created_state(states)
        if created_state is None:
            flagged = sum(1 for state in states if state.is_created_state)
            logger.warning("No unique created incident state", conversation_id=conversation_id, flagged=flagged)
            await self.chatwoot.send_message(conversation_id, notes.missing_created_state(flagged))
            return OrchestrationResult(CreationOutcome.MISSING_CREATED_STATE)

        policy = None
        if request.team:
            policy = match_policy(policies, request.team)
            if policy is None:
                logger.info("Unknown team requested", conversation_id=conversation_id, team=request.team)
                await self.chatwoot.send_message(
                    conversation_id,
                    notes.unknown_team(request.team, [p.name for p in policies])
                )
                return OrchestrationResult(CreationOutcome.UNKNOWN_TEAM)

        title = request.title or default_title(conversation_id, severity.name)
        description = build_incident_description(
            conversation,
            conversation.messages,
            self.chatwoot.base_url,
            await self.chatwoot.get_account_id()
        )

        incident = await self.oneuptime.create_incident(
            title=title,
            description=description,
            severity_id=severity.id,
            state_id=created_state.id,
            policy_ids=[policy.id] if policy else None
        )
        incident_id = incident.id
        incident_url = await self.oneuptime.incident_url(incident_id)

        results = await asyncio.gather(
            self.chatwoot.update_custom_attributes(
                conversation_id,
                {
                    "oneuptime_incident_id": incident_id,
                    "oneuptime_incident_status": created_state.name,
                    "oneuptime_incident_severity": severity.name,
                    "oneuptime_incident_url": incident_url,
                }
            ),
            self.chatwoot.send_message(
                conversation_id,
                notes.incident_created(
                    incident_id,
                    severity.name,
                    created_state.name,
                    incident_url,
                    team_name=policy.name if policy else None
                )
            ),
            return_exceptions=True
        )
        for action, result in zip(("update_custom_attributes", "send_message"), results):
            if isinstance(result, Exception):
                logger.error(
                    "Failed to update conversation after incident creation",
                    action=action,
                    conversation_id=conversation_id,
                    incident_id=incident_id,
                    error=str(result)
                )

        self.tracker.track(
            conversation_id,
            incident_id,
            created_state.id,
            {state.id: state.name for state in states}
        )

        logger.info(
            "Created incident for conversation",
            incident_id=incident_id,
            conversation_id=conversation_id,
            severity=severity.name
        )
        return OrchestrationResult(CreationOutcome.CREATED, incident_id=incident_id)
