"""Shared fixtures: required settings and in-memory Chatwoot / OneUptime fakes."""
import os

# Settings() is instantiated at import time and needs these.
os.environ.setdefault("CHATWOOT_BASE_URL", "https://chat.example.com/")
os.environ.setdefault("CHATWOOT_API_TOKEN", "test-token")
os.environ.setdefault("CHATWOOT_ACCOUNT_ID", "1")

from typing import Any, Dict, List, Optional  # noqa: E402
import pytest  # noqa: E402
from integrations.base import ApiError  # noqa: E402
from integrations.models import (  # noqa: E402
    Conversation,
    Incident,
    IncidentState,
    OnCallPolicy,
    OneUptimeConfig,
    Severity,
)
from workers.tracker import LinkTracker  # noqa: E402

ONEUPTIME_BASE = "https://oneuptime.example.com"
PROJECT_ID = "proj-1"


class FakeConfigProvider:
    def __init__(self):
        self.config = OneUptimeConfig(base_url=ONEUPTIME_BASE, project_id=PROJECT_ID, api_key="key")

    async def get_config(self) -> OneUptimeConfig:
        return self.config


class FakeChatwoot:
    """Records every note and attribute update."""

    def __init__(self):
        self.base_url = "https://chat.example.com"
        self.account_id = "1"
        self.conversations: Dict[str, Dict[str, Any]] = {}
        self.sent: List[Dict[str, Any]] = []
        self.attributes: List[Dict[str, Any]] = []
        self.fail_get_conversation = False
        self.fail_send = False
        self.fail_attributes = False
        self.closed = False

    def add_conversation(self, conversation_id, messages=None, sender=None):
        self.conversations[str(conversation_id)] = {
            "id": conversation_id,
            "meta": {"sender": sender} if sender is not None else {},
            "messages": messages or [],
        }

    async def get_account_id(self) -> str:
        return self.account_id

    async def get_conversation(self, conversation_id) -> Conversation:
        if self.fail_get_conversation:
            raise ApiError("Chatwoot", "GET", f"/conversations/{conversation_id}", status=500)
        data = self.conversations.get(str(conversation_id), {"id": conversation_id})
        return Conversation.model_validate(data)

    async def send_message(self, conversation_id, content: str, private: bool = True):
        if self.fail_send:
            raise ApiError("Chatwoot", "POST", f"/conversations/{conversation_id}/messages", status=502)
        self.sent.append({"conversation_id": conversation_id, "content": content, "private": private})
        return {"id": len(self.sent)}

    async def update_custom_attributes(self, conversation_id, custom_attributes: Dict[str, Any]):
        if self.fail_attributes:
            raise ApiError("Chatwoot", "POST", f"/conversations/{conversation_id}/custom_attributes", status=502)
        self.attributes.append({"conversation_id": conversation_id, "attributes": dict(custom_attributes)})
        return {}

    async def close(self):
        self.closed = True


class FakeOneUptime:
    """Reference data plus a mutable incident -> current state table."""

    def __init__(self):
        self.config_provider = FakeConfigProvider()
        self.severities = [
            Severity(id="sev-critical", name="Critical"),
            Severity(id="sev-major", name="Major"),
        ]
        self.states = [
            IncidentState(id="state-open", name="Open", is_created_state=True),
            IncidentState(id="state-ack", name="Acknowledged", is_acknowledged_state=True),
            IncidentState(id="state-resolved", name="Resolved", is_resolved_state=True),
        ]
        self.policies = [
            OnCallPolicy(id="pol-backend", name="Backend On-Call"),
            OnCallPolicy(id="pol-frontend", name="Frontend On-Call"),
        ]
        self.created: List[Dict[str, Any]] = []
        self.incident_states: Dict[str, Optional[str]] = {}
        self.incident_errors: Dict[str, Exception] = {}
        self.get_incident_calls: List[str] = []
        self.fail_list_states = False
        self.closed = False

    async def list_severities(self):
        return list(self.severities)

    async def list_states(self):
        if self.fail_list_states:
            raise ApiError("OneUptime", "POST", "/incident-state/get-list", status=503)
        return list(self.states)

    async def list_policies(self):
        return list(self.policies)

    async def create_incident(self, title, description, severity_id, state_id, policy_ids=None) -> Incident:
        incident_id = f"inc-{len(self.created) + 1}"
        self.created.append({
            "id": incident_id,
            "title": title,
            "description": description,
            "severity_id": severity_id,
            "state_id": state_id,
            "policy_ids": policy_ids,
        })
        self.incident_states[incident_id] = state_id
        return Incident(id=incident_id, current_state_id=state_id)

    async def get_incident(self, incident_id) -> Incident:
        self.get_incident_calls.append(incident_id)
        if incident_id in self.incident_errors:
            raise self.incident_errors[incident_id]
        if incident_id not in self.incident_states:
            raise ApiError("OneUptime", "POST", f"/incident/{incident_id}/get-item", status=404)
        return Incident(id=incident_id, current_state_id=self.incident_states[incident_id])

    async def project_id(self) -> str:
        return PROJECT_ID

    async def incident_url(self, incident_id: str) -> str:
        return f"{ONEUPTIME_BASE}/dashboard/{PROJECT_ID}/incidents/{incident_id}"

    async def close(self):
        self.closed = True


@pytest.fixture
def chatwoot() -> FakeChatwoot:
    return FakeChatwoot()


@pytest.fixture
def oneuptime() -> FakeOneUptime:
    return FakeOneUptime()


@pytest.fixture
def tracker() -> LinkTracker:
    return LinkTracker()


@pytest.fixture
def state_map() -> Dict[str, str]:
    return {"state-open": "Open", "state-ack": "Acknowledged", "state-resolved": "Resolved"}
