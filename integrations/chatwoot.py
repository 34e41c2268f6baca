"""Chatwoot API client: conversations, notes and custom attributes."""
import asyncio
from typing import Any, Dict, List, Optional
import httpx
from core.logging import get_logger
from integrations.base import BaseApiClient, ConfigurationError
from integrations.models import Conversation, HookList, IntegrationHook, Profile

logger = get_logger(__name__)


class ChatwootClient(BaseApiClient):
    """Client for the Chatwoot application API."""

    service_name = "Chatwoot"

    def __init__(
        self,
        base_url: str,
        api_token: str,
        account_id: Optional[str] = None,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize Chatwoot client.

        Args:
            base_url: Chatwoot base URL, without trailing slash
            api_token: User access token sent as `api_access_token`
            account_id: Account ID (discovered from the profile when omitted)
            timeout: Per-request timeout in seconds
            client: Optional preconfigured AsyncClient
        """
        super().__init__(timeout=timeout, client=client)
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._account_id = str(account_id) if account_id else None
        self._account_lock = asyncio.Lock()

        logger.info("Chatwoot client initialized", base_url=self.base_url)

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "api_access_token": self._api_token,
        }

    async def get_account_id(self) -> str:
        """
        Return the account ID, resolving it from /api/v1/profile on first use.

        Raises:
            ConfigurationError: If the token has no accounts
        """
        if self._account_id:
            return self._account_id

        async with self._account_lock:
            if self._account_id:
                return self._account_id

            path = "/api/v1/profile"
            data = await self._request("GET", f"{self.base_url}{path}", path, self._headers)
            profile = self._parse(Profile, data, "GET", path)
            accounts = profile.available_accounts or profile.accounts
            if not accounts:
                raise ConfigurationError(
                    "No accounts found for the configured API token. "
                    "Ensure CHATWOOT_API_TOKEN belongs to a user with at least one account."
                )

            self._account_id = str(accounts[0].id)
            logger.info(
                "Resolved Chatwoot account ID",
                account_id=self._account_id,
                account_name=accounts[0].name or "unnamed"
            )
            return self._account_id

    async def _account_request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        account_id = await self.get_account_id()
        full_path = f"/api/v1/accounts/{account_id}{path}"
        return await self._request(method, f"{self.base_url}{full_path}", full_path, self._headers, json=json)

    async def get_conversation(self, conversation_id: int | str) -> Conversation:
        """Fetch a conversation including its messages."""
        path = f"/conversations/{conversation_id}"
        data = await self._account_request("GET", path)
        return self._parse(Conversation, data, "GET", path)

    async def send_message(
        self,
        conversation_id: int | str,
        content: str,
        private: bool = True
    ) -> Dict[str, Any]:
        """
        Post a message to a conversation.

        Args:
            conversation_id: Conversation ID
            content: Markdown content
            private: Post as an agent-only note (default) instead of a customer-visible reply
        """
        return await self._account_request(
            "POST",
            f"/conversations/{conversation_id}/messages",
            json={
                "content": content,
                "message_type": "outgoing",
                "private": private,
            }
        )

    async def update_custom_attributes(
        self,
        conversation_id: int | str,
        custom_attributes: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Merge custom attributes into a conversation; only the given keys are overwritten."""
        return await self._account_request(
            "POST",
            f"/conversations/{conversation_id}/custom_attributes",
            json={"custom_attributes": custom_attributes}
        )

    async def get_integration_hooks(self, app_id: str) -> List[IntegrationHook]:
        """List the hooks installed for an integration app (e.g. 'oneuptime')."""
        path = f"/integrations/apps/{app_id}"
        data = await self._account_request("GET", path)
        return self._parse(HookList, data, "GET", path).hooks
