"""Shared HTTP plumbing and error types for the Chatwoot and OneUptime clients."""
from typing import Any, Dict, Optional
import httpx
from pydantic import BaseModel, ValidationError
from core.logging import get_logger

logger = get_logger(__name__)


class IntegrationError(Exception):
    """Base error for everything that goes wrong talking to an upstream service."""


class ConfigurationError(IntegrationError):
    """Upstream credentials or settings are missing or incomplete."""


class ApiError(IntegrationError):
    """An upstream HTTP call failed or returned an unusable payload."""

    def __init__(
        self,
        service: str,
        method: str,
        path: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        reason: Optional[str] = None
    ):
        self.service = service
        self.method = method
        self.path = path
        self.status = status
        self.body = body
        detail = f"{service} {method} {path}"
        if status is not None:
            detail += f" -> {status}"
        if reason:
            detail += f": {reason}"
        super().__init__(detail)


class BaseApiClient:
    """
    Thin JSON-over-HTTP client around a shared httpx.AsyncClient.

    Subclasses supply the service name and the auth headers; this class owns
    status checking, JSON decoding and payload validation.
    """

    service_name = "upstream"

    def __init__(
        self,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the client.

        Args:
            timeout: Per-request timeout in seconds
            client: Optional preconfigured AsyncClient (tests inject a MockTransport here)
        """
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _request(
        self,
        method: str,
        url: str,
        path: str,
        headers: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Perform a request and decode the JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            path: Path used in error messages and logs
            headers: Request headers
            json: Optional JSON body
            params: Optional query parameters

        Returns:
            Decoded JSON, or an empty dict for an empty body

        Raises:
            ApiError: On transport failure, non-2xx status or undecodable body
        """
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params
            )
        except httpx.HTTPError as e:
            raise ApiError(self.service_name, method, path, reason=str(e) or type(e).__name__) from e

        if response.is_error:
            raise ApiError(
                self.service_name,
                method,
                path,
                status=response.status_code,
                body=response.text
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                self.service_name,
                method,
                path,
                status=response.status_code,
                body=response.text,
                reason="invalid JSON"
            ) from e

    def _parse(self, model: type[BaseModel], data: Any, method: str, path: str):
        """Validate a payload into a record, mapping validation failures to ApiError."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(
                "Unexpected upstream payload",
                service=self.service_name,
                path=path,
                error=str(e)
            )
            raise ApiError(self.service_name, method, path, reason=f"unexpected payload: {e}") from e

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
