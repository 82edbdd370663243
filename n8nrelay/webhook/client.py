"""
WebhookClient: outbound calls to n8n webhooks.

Every call is a single POST to {base_url}/webhook/{path} with a JSON body,
an optional X-N8N-API-KEY header and a fixed timeout. There are no retries:
a webhook call fires an automation, it is not a delivery pipeline.

Two modes:
  - send(..., await_response=True)   awaits the body and returns a WebhookResult
  - send(..., await_response=False)  schedules the POST and returns None at once;
                                     the outcome is only logged
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from n8nrelay.config.logging import get_logger
from n8nrelay.config.settings import N8nSettings
from n8nrelay.errors import TransportError
from n8nrelay.webhook.formatting import render_body
from n8nrelay.webhook.models import WebhookResult

logger = get_logger(__name__)

API_KEY_HEADER = "X-N8N-API-KEY"
DEFAULT_TIMEOUT = 10.0


class WebhookClient:
    """
    Async client for n8n webhooks.

    Owns one httpx.AsyncClient for its lifetime. Use it as an async context
    manager (or call aclose()) so pending background sends are drained and
    the connection pool is closed.

    Args:
        base_url: n8n base URL, e.g. "http://n8n:5678"
        api_key: Sent as X-N8N-API-KEY when non-empty
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.strip().rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: N8nSettings) -> WebhookClient:
        return cls(
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout=settings.timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def pending(self) -> int:
        """Number of fire-and-forget sends still in flight."""
        return len(self._background)

    def build_url(self, webhook_path: str) -> str:
        """Return {base_url}/webhook/{path} for a trimmed, non-empty path."""
        path = webhook_path.strip().lstrip("/")
        if not path:
            raise ValueError("webhook path must not be empty")
        return f"{self._base_url}/webhook/{path}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {API_KEY_HEADER: self._api_key} if self._api_key else {}
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def send(
        self,
        webhook_path: str,
        payload: dict[str, Any],
        await_response: bool = True,
    ) -> WebhookResult | None:
        """
        POST `payload` to the named webhook.

        Args:
            webhook_path: Webhook path below /webhook/ (e.g. "my-workflow")
            payload: JSON-serializable body
            await_response: If False, fire-and-forget: schedule the call,
                log its outcome, and return None immediately

        Returns:
            WebhookResult for awaited calls, None for fire-and-forget calls

        Raises:
            ValueError: If webhook_path is empty after trimming
        """
        url = self.build_url(webhook_path)

        if not await_response:
            task = asyncio.create_task(self._send_in_background(url, payload))
            self._background.add(task)
            task.add_done_callback(self._background.discard)
            return None

        try:
            text = await self._post(url, payload)
        except TransportError as e:
            logger.warning(f"Webhook {url} failed: {e}")
            return WebhookResult.failure(str(e))

        logger.debug(f"Webhook {url} answered with {len(text)} chars")
        return WebhookResult.success(text)

    async def _post(self, url: str, payload: dict[str, Any]) -> str:
        """Single POST; returns the rendered body or raises TransportError."""
        try:
            response = await self._get_client().post(url, json=payload)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out after {self._timeout:g}s") from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        data = _decode_body(response)
        if response.is_error:
            raise TransportError(
                _error_message(response, data), status_code=response.status_code
            )
        return render_body(data)

    async def _send_in_background(self, url: str, payload: dict[str, Any]) -> None:
        try:
            text = await self._post(url, payload)
        except TransportError as e:
            logger.warning(f"Background webhook {url} failed: {e}")
        except Exception:
            # Nobody awaits this task, so nothing else would report the failure
            logger.exception(f"Background webhook {url} raised unexpectedly")
        else:
            logger.info(f"Background webhook {url} delivered ({len(text)} chars)")

    async def aclose(self) -> None:
        """Wait for pending background sends, then close the HTTP client."""
        if self._background:
            logger.info(f"Waiting for {len(self._background)} pending webhook call(s)...")
            await asyncio.gather(*self._background, return_exceptions=True)
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> WebhookClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False


def _decode_body(response: httpx.Response) -> Any:
    """JSON when the body parses as JSON, raw text otherwise."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(response: httpx.Response, data: Any) -> str:
    """Prefer the `message` field n8n puts in error bodies."""
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"Request failed with status code {response.status_code} ({response.reason_phrase})"
