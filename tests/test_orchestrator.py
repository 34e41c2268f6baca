"""Tests for the incident creation flow."""
import pytest
from core.logging import configure_logging, get_logger
from escalation.commands import IncidentRequest
from escalation.orchestrator import CreationOutcome, IncidentOrchestrator, default_title
from integrations.models import IncidentState

configure_logging()
logger = get_logger(__name__)


@pytest.fixture
def orchestrator(chatwoot, oneuptime, tracker):
    chatwoot.add_conversation(
        42,
        messages=[
            {"content": "The checkout page returns 500", "private": False, "message_type": 0},
            {"content": "/oncall\nSeverity: Critical", "private": True, "message_type": 1},
        ],
        sender={"name": "Ada", "email": "ada@example.com"},
    )
    return IncidentOrchestrator(chatwoot, oneuptime, tracker)


@pytest.mark.asyncio
async def test_creates_incident_and_links_conversation(orchestrator, chatwoot, oneuptime, tracker):
    """Happy path: incident created, conversation updated, link registered."""
    result = await orchestrator.create_incident(42, IncidentRequest(severity="Critical"))

    assert result.outcome == CreationOutcome.CREATED
    assert result.incident_id == "inc-1"

    created = oneuptime.created[0]
    assert created["title"] == "[Chatwoot #42] Support escalation - Critical"
    assert created["severity_id"] == "sev-critical"
    assert created["state_id"] == "state-open"
    assert created["policy_ids"] is None
    assert "https://chat.example.com/app/accounts/1/conversations/42" in created["description"]
    assert "> **Customer:** The checkout page returns 500" in created["description"]
    assert "/oncall" not in created["description"]

    assert chatwoot.attributes == [{
        "conversation_id": 42,
        "attributes": {
            "oneuptime_incident_id": "inc-1",
            "oneuptime_incident_status": "Open",
            "oneuptime_incident_severity": "Critical",
            "oneuptime_incident_url": "https://oneuptime.example.com/dashboard/proj-1/incidents/inc-1",
        },
    }]
    assert len(chatwoot.sent) == 1
    note = chatwoot.sent[0]
    assert note["private"] is True
    assert "`inc-1`" in note["content"]
    assert "| **Status** | Open |" in note["content"]
    assert "On-Call Team" not in note["content"]

    assert tracker.size() == 1
    link = tracker.get("inc-1")
    assert link.conversation_id == 42
    assert link.last_known_state_id == "state-open"
    assert link.state_map == {"state-open": "Open", "state-ack": "Acknowledged", "state-resolved": "Resolved"}
    logger.info("✓ Incident created and linked")


@pytest.mark.asyncio
async def test_team_and_title_are_used(orchestrator, chatwoot, oneuptime):
    request = IncidentRequest(severity="maj", team="backend", title="Payments API down")
    result = await orchestrator.create_incident(42, request)

    assert result.outcome == CreationOutcome.CREATED
    created = oneuptime.created[0]
    assert created["title"] == "Payments API down"
    assert created["severity_id"] == "sev-major"
    assert created["policy_ids"] == ["pol-backend"]
    assert "| **On-Call Team** | Backend On-Call |" in chatwoot.sent[0]["content"]


@pytest.mark.asyncio
async def test_unknown_severity_is_reported_inline(orchestrator, chatwoot, oneuptime, tracker):
    result = await orchestrator.create_incident(42, IncidentRequest(severity="sev1"))

    assert result.outcome == CreationOutcome.UNKNOWN_SEVERITY
    assert oneuptime.created == []
    assert tracker.size() == 0
    assert chatwoot.sent[0]["content"] == '**OneUptime:** Unknown severity "sev1". Available: Critical, Major'


@pytest.mark.asyncio
async def test_unknown_team_is_reported_inline(orchestrator, chatwoot, oneuptime, tracker):
    result = await orchestrator.create_incident(42, IncidentRequest(severity="Critical", team="Mobile"))

    assert result.outcome == CreationOutcome.UNKNOWN_TEAM
    assert oneuptime.created == []
    assert tracker.size() == 0
    assert "Backend On-Call, Frontend On-Call" in chatwoot.sent[0]["content"]


@pytest.mark.asyncio
async def test_missing_created_state_is_configuration_error(orchestrator, chatwoot, oneuptime, tracker):
    oneuptime.states = [IncidentState(id="state-ack", name="Acknowledged")]

    result = await orchestrator.create_incident(42, IncidentRequest(severity="Critical"))

    assert result.outcome == CreationOutcome.MISSING_CREATED_STATE
    assert oneuptime.created == []
    assert "Could not find the Created incident state" in chatwoot.sent[0]["content"]


@pytest.mark.asyncio
async def test_several_created_states_are_not_guessed(orchestrator, chatwoot, oneuptime, tracker):
    oneuptime.states.append(IncidentState(id="state-new", name="New", is_created_state=True))

    result = await orchestrator.create_incident(42, IncidentRequest(severity="Critical"))

    assert result.outcome == CreationOutcome.MISSING_CREATED_STATE
    assert oneuptime.created == []
    assert tracker.size() == 0
    assert "Found 2 incident states" in chatwoot.sent[0]["content"]


@pytest.mark.asyncio
async def test_fetch_failure_raises_from_create(orchestrator, oneuptime):
    oneuptime.fail_list_states = True

    with pytest.raises(Exception):
        await orchestrator.create_incident(42, IncidentRequest(severity="Critical"))
    assert oneuptime.created == []


@pytest.mark.asyncio
async def test_handle_command_posts_failure_note(orchestrator, chatwoot, oneuptime, tracker):
    oneuptime.fail_list_states = True

    result = await orchestrator.handle_command(42, IncidentRequest(severity="Critical"))

    assert result.outcome == CreationOutcome.FAILED
    assert tracker.size() == 0
    assert chatwoot.sent[0]["content"].startswith("**OneUptime Integration Error**\n\nFailed to create incident: ")
    assert "503" in chatwoot.sent[0]["content"]


@pytest.mark.asyncio
async def test_handle_command_swallows_notification_failure(orchestrator, chatwoot):
    chatwoot.fail_get_conversation = True
    chatwoot.fail_send = True

    result = await orchestrator.handle_command(42, IncidentRequest(severity="Critical"))

    assert result.outcome == CreationOutcome.FAILED
    assert chatwoot.sent == []


@pytest.mark.asyncio
async def test_post_creation_failures_do_not_block_link(orchestrator, chatwoot, tracker):
    """Attribute update failing must not stop the note, nor the link."""
    chatwoot.fail_attributes = True

    result = await orchestrator.create_incident(42, IncidentRequest(severity="Critical"))

    assert result.outcome == CreationOutcome.CREATED
    assert len(chatwoot.sent) == 1
    assert tracker.size() == 1


@pytest.mark.asyncio
async def test_multiple_incidents_per_conversation(orchestrator, tracker):
    await orchestrator.create_incident(42, IncidentRequest(severity="Critical"))
    await orchestrator.create_incident(42, IncidentRequest(severity="Major"))

    assert tracker.size() == 2


def test_default_title():
    assert default_title(7, "Major") == "[Chatwoot #7] Support escalation - Major"
