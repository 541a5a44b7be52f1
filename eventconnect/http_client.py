"""HTTP client for communicating with the EventConnect REST API."""

from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from eventconnect.errors import (
    AuthError,
    HttpStatusError,
    MalformedResponseError,
    NotFoundError,
    TransportError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def error_message(status_code: int, body: Any) -> str:
    """Human-readable message for an error response body."""
    if isinstance(body, Mapping):
        field_errors = field_messages(body)
        if status_code == 400 and field_errors:
            return "; ".join(field_errors)
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {status_code}"


def field_messages(body: Mapping[str, Any]) -> list:
    """Per-field messages from ``errors[].defaultMessage`` or ``details[]``."""
    messages = []
    for error in body.get("errors") or []:
        if isinstance(error, Mapping):
            message = error.get("defaultMessage") or error.get("message")
        else:
            message = error
        if message:
            messages.append(str(message))
    if not messages:
        messages = [str(detail) for detail in body.get("details") or [] if detail]
    return messages


class EventConnectHTTPClient:
    """Async client for the EventConnect backend."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the API including the ``/api`` prefix
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )
        self.logger = logger.bind(component="http_client", base_url=self.base_url)

    async def __aenter__(self) -> "EventConnectHTTPClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        token: Optional[str] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the API base (e.g. "/reservations/stats")
            params: Query string parameters
            json: JSON request body
            token: Bearer token for authenticated calls

        Returns:
            Decoded JSON body, or None for an empty response

        Raises:
            TransportError: network failure or timeout
            AuthError: 401/403
            NotFoundError: 404
            ValidationError: 400 with per-field messages
            HttpStatusError: any other non-2xx status
            MalformedResponseError: body is not valid JSON
        """
        headers = {'Authorization': f'Bearer {token}'} if token else None

        try:
            response = await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.TimeoutException as e:
            self.logger.warning("Request timed out", method=method, path=path, error=str(e))
            raise TransportError(f"Request to {path} timed out") from e
        except httpx.TransportError as e:
            self.logger.warning("Request failed", method=method, path=path, error=str(e))
            raise TransportError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            raise self._status_error(response, path)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"malformed response: {path} did not return JSON") from e

    def _status_error(self, response: httpx.Response, path: str) -> Exception:
        try:
            body = response.json()
        except ValueError:
            body = response.text or None

        status = response.status_code
        message = error_message(status, body)
        self.logger.error("Backend returned an error", path=path, status_code=status, message=message)

        if status in (401, 403):
            return AuthError(message)
        if status == 404:
            return NotFoundError(message)
        if status == 400 and isinstance(body, Mapping):
            field_errors = field_messages(body)
            if field_errors:
                return ValidationError(field_errors, body=body)
        return HttpStatusError(status, message, body)

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)
