"""PanelApiClient: async wrapper over httpx for the /panels resource collection."""

import logging
from typing import Any

import httpx

from .assembler import PanelAssembler, decode_body
from .config import ClientConfig, load_config
from .errors import NetworkError, RemoteError
from .types import Panel, PanelDraft, PanelPage

logger = logging.getLogger(__name__)

BASE_PATH = "/panels"


async def _log_request(request: httpx.Request) -> None:
    logger.debug("HTTP request: %s %s", request.method, request.url)


async def _log_response(response: httpx.Response) -> None:
    if response.is_error:
        logger.warning("HTTP response: %s %s", response.status_code, response.request.url)
    else:
        logger.debug("HTTP response: %s %s", response.status_code, response.request.url)


def _error_body(response: httpx.Response) -> tuple[str | None, Any]:
    """Pull (message, detail) out of an error body; tolerate non-JSON bodies."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    message = body.get("message")
    return (message if isinstance(message, str) else None), body.get("detail")


class PanelApiClient:
    """
    Create/read/update/delete calls for panels. Every call is one round trip:
    no caching, no retries. Wire conversion is delegated to PanelAssembler.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config if config is not None else load_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.api_url.rstrip("/"),
                headers={"Content-Type": "application/json"},
                timeout=self._config.timeout_seconds,
                transport=self._transport,
                event_hooks={"request": [_log_request], "response": [_log_response]},
            )
        return self._client

    async def _send(self, method: str, path: str, payload: dict[str, Any] | None = None) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(method, path, json=payload)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out after {self._config.timeout_seconds}s: {method} {path}", cause=e) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Request failed: {method} {path}: {e}", cause=e) from e

        if response.is_error:
            remote_message, detail = _error_body(response)
            raise RemoteError(
                remote_message or f"Server returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
                remote_message=remote_message,
                detail=detail,
            )
        return response

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning("Error closing HTTP client: %s", e)
            self._client = None

    async def __aenter__(self) -> "PanelApiClient":
        self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def list_panels(self) -> PanelPage:
        """Fetch every panel; total comes from the response, else the list length."""
        response = await self._send("GET", BASE_PATH)
        panels = PanelAssembler.to_entity_list(response)
        total = 0
        if response.status_code == 200:
            body = decode_body(response)
            if isinstance(body, dict) and isinstance(body.get("total"), int):
                total = body["total"]
        return PanelPage(panels=panels, total=total or len(panels))

    async def get_panel(self, panel_id: str) -> Panel | None:
        """Fetch one panel by id."""
        response = await self._send("GET", f"{BASE_PATH}/{panel_id}")
        return PanelAssembler.to_entity_or_none(response)

    async def create_panel(self, draft: PanelDraft) -> Panel | None:
        """Create a panel from a complete draft; returns it with the server-assigned id."""
        payload = PanelAssembler.to_create_payload(draft)
        response = await self._send("POST", BASE_PATH, payload)
        return PanelAssembler.to_entity_or_none(response)

    async def update_panel(self, panel_id: str, draft: PanelDraft) -> Panel | None:
        """Send only the fields set on the draft."""
        payload = PanelAssembler.to_update_payload(draft)
        response = await self._send("PUT", f"{BASE_PATH}/{panel_id}", payload)
        return PanelAssembler.to_entity_or_none(response)

    async def delete_panel(self, panel_id: str) -> str:
        """Delete a panel; returns the server's confirmation message."""
        response = await self._send("DELETE", f"{BASE_PATH}/{panel_id}")
        if not response.content:
            return ""
        body = decode_body(response)
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return ""
