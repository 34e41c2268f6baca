"""Pydantic records for Chatwoot and OneUptime API payloads."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def unwrap_value(value: Any) -> Any:
    """OneUptime wraps ObjectIDs as {"_type": "ObjectID", "value": "..."}; return the inner value."""
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value


class _ApiRecord(BaseModel):
    """Base record: tolerate unknown fields, accept both aliases and field names."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ============================================
# OneUptime
# ============================================
class ReferenceItem(_ApiRecord):
    """A named OneUptime reference entity (severity, state, on-call policy)."""
    id: str = Field(..., alias="_id")
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def unwrap_id(cls, value: Any) -> Any:
        return unwrap_value(value)


class Severity(ReferenceItem):
    """Incident severity, listed in ascending `order`."""


class OnCallPolicy(ReferenceItem):
    """On-call duty policy, listed newest first."""


class IncidentState(ReferenceItem):
    """Incident lifecycle state, listed in ascending `order`."""
    is_created_state: bool = Field(default=False, alias="isCreatedState")
    is_acknowledged_state: bool = Field(default=False, alias="isAcknowledgedState")
    is_resolved_state: bool = Field(default=False, alias="isResolvedState")

    @field_validator("is_created_state", "is_acknowledged_state", "is_resolved_state", mode="before")
    @classmethod
    def null_as_false(cls, value: Any) -> Any:
        return False if value is None else value


class Incident(_ApiRecord):
    """The slice of a OneUptime incident this service reads back."""
    id: Optional[str] = Field(default=None, alias="_id")
    title: Optional[str] = None
    current_state_id: Optional[str] = Field(default=None, alias="currentIncidentStateId")
    severity_id: Optional[str] = Field(default=None, alias="incidentSeverityId")

    @field_validator("id", "current_state_id", "severity_id", mode="before")
    @classmethod
    def unwrap_ids(cls, value: Any) -> Any:
        return unwrap_value(value)


class ListEnvelope(_ApiRecord):
    """`get-list` response; rows are validated into their own records afterwards."""
    data: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class CreatedIncident(Incident):
    """Create response: the incident itself, or the incident wrapped under `data`."""
    data: Optional[Incident] = None

    def unwrap(self) -> Incident:
        if self.id or self.data is None:
            return self
        return self.data


class OneUptimeConfig(_ApiRecord):
    """Connection details for a OneUptime project."""
    base_url: str
    project_id: str
    api_key: str

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.lower().startswith(("http://", "https://")):
            value = "http://" + value
        return value

    def incident_url(self, incident_id: str) -> str:
        """Dashboard deep link for an incident."""
        return f"{self.base_url}/dashboard/{self.project_id}/incidents/{incident_id}"


# ============================================
# Chatwoot
# ============================================
CUSTOMER_MESSAGE_TYPES = (0, "incoming")


class Account(_ApiRecord):
    id: int | str
    name: Optional[str] = None


class Profile(_ApiRecord):
    """`/api/v1/profile`: the token owner and the accounts it can act in."""
    available_accounts: List[Account] = Field(default_factory=list)
    accounts: List[Account] = Field(default_factory=list)

    @field_validator("available_accounts", "accounts", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class Sender(_ApiRecord):
    """Conversation contact."""
    name: Optional[str] = None
    email: Optional[str] = None


class ConversationMeta(_ApiRecord):
    sender: Optional[Sender] = None


class Message(_ApiRecord):
    """A single conversation message."""
    content: Optional[str] = None
    private: bool = False
    message_type: int | str | None = None

    @field_validator("private", mode="before")
    @classmethod
    def null_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def is_from_customer(self) -> bool:
        return self.message_type in CUSTOMER_MESSAGE_TYPES


class Conversation(_ApiRecord):
    """Chatwoot conversation with its embedded messages."""
    id: int | str
    meta: Optional[ConversationMeta] = None
    messages: List[Message] = Field(default_factory=list)

    @field_validator("messages", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def sender(self) -> Optional[Sender]:
        return self.meta.sender if self.meta else None


class IntegrationHook(_ApiRecord):
    """An installed Chatwoot integration hook."""
    id: int | str | None = None
    app_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class HookList(_ApiRecord):
    hooks: List[IntegrationHook] = Field(default_factory=list)

    @field_validator("hooks", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value
