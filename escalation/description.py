"""Incident description linking back to the originating Chatwoot conversation."""
from typing import Sequence
from integrations.models import Conversation, Message

RECENT_MESSAGE_COUNT = 5


def conversation_url(chatwoot_base_url: str, account_id: str, conversation_id: int | str) -> str:
    """Deep link to a conversation in the Chatwoot agent dashboard."""
    return f"{chatwoot_base_url}/app/accounts/{account_id}/conversations/{conversation_id}"


def _quote(message: Message) -> str:
    who = "Customer" if message.is_from_customer else "Agent"
    return f"> **{who}:** {message.content}"


def build_incident_description(
    conversation: Conversation,
    messages: Sequence[Message],
    chatwoot_base_url: str,
    account_id: str
) -> str:
    """
    Render the markdown description for a new incident.

    Args:
        conversation: Conversation the command was posted in
        messages: Conversation messages in chronological order
        chatwoot_base_url: Chatwoot base URL for the deep link
        account_id: Chatwoot account ID for the deep link

    Returns:
        Markdown with the conversation link, customer and the last few public messages
    """
    url = conversation_url(chatwoot_base_url, account_id, conversation.id)
    public = [message for message in messages if not message.private and message.content]
    recent = "\n>\n".join(_quote(message) for message in public[-RECENT_MESSAGE_COUNT:])

    md = f"### Incident created from Chatwoot conversation #{conversation.id}\n\n"
    md += f"**Conversation link:** [Open in Chatwoot]({url})\n\n"

    sender = conversation.sender
    if sender is not None:
        md += f"**Customer:** {sender.name or 'Unknown'}"
        if sender.email:
            md += f" ({sender.email})"
        md += "\n\n"

    if recent:
        md += "#### Recent conversation\n\n" + recent + "\n"

    return md
