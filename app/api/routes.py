"""Webhook route receiving Chatwoot events."""
from fastapi import APIRouter, BackgroundTasks, Request, status
from fastapi.responses import JSONResponse
from app.models import WebhookAcceptedResponse, WebhookIgnoredResponse, WebhookPayload
from app.services import BridgeServices
from escalation.commands import CommandStatus, is_command, parse_command, strip_html
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhook"])


def _ignored(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=WebhookIgnoredResponse(reason=reason).model_dump()
    )


@router.post("/webhook")
async def handle_webhook(
    payload: WebhookPayload,
    request: Request,
    background_tasks: BackgroundTasks
) -> JSONResponse:
    """
    Receive a Chatwoot event and start incident creation for `/oncall` notes.

    The response is sent before the incident is created; failures from then
    on are reported inside the conversation.

    Args:
        payload: Chatwoot webhook event
        request: Incoming request (for app state)
        background_tasks: FastAPI background tasks

    Returns:
        202 when incident creation was scheduled, 200 when the event was ignored
    """
    if payload.event != "message_created":
        return _ignored("not message_created")

    if not payload.private:
        return _ignored("not a private note")

    content = strip_html((payload.content or "").strip())
    if not is_command(content):
        return _ignored("no /oncall command")

    parsed = parse_command(content)
    if parsed.status == CommandStatus.MISSING_SEVERITY:
        return _ignored("could not parse command - severity is required")

    conversation_id = payload.conversation_id
    if not conversation_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "missing conversation id"}
        )

    services: BridgeServices = request.app.state.services
    background_tasks.add_task(
        services.orchestrator.handle_command,
        conversation_id,
        parsed.request
    )

    logger.info(
        "Incident creation scheduled",
        conversation_id=conversation_id,
        severity=parsed.request.severity,
        team=parsed.request.team
    )

    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content=WebhookAcceptedResponse().model_dump()
    )
