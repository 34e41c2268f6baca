"""Pydantic models for the webhook and health endpoints."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class WebhookConversation(BaseModel):
    """Conversation reference embedded in a Chatwoot webhook event."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int | str] = None
    display_id: Optional[int | str] = None


class WebhookPayload(BaseModel):
    """Chatwoot webhook event. Only the fields used to detect `/oncall` notes are modelled."""
    model_config = ConfigDict(extra="ignore")

    event: Optional[str] = None
    private: Optional[bool] = False
    content: Optional[str] = None
    conversation: Optional[WebhookConversation] = None

    @property
    def conversation_id(self) -> Optional[int | str]:
        if self.conversation is None:
            return None
        return self.conversation.id or self.conversation.display_id


class WebhookIgnoredResponse(BaseModel):
    ignored: bool = True
    reason: str


class WebhookAcceptedResponse(BaseModel):
    status: str = "processing"


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    oneuptime_connected: bool
    tracked_incidents: int
    uptime: float = Field(..., description="Seconds since the process started")
