"""LINE Messaging API client: content download and reply delivery.

Each call is a single attempt bounded by a timeout; failures are raised
for the caller to record, never retried.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

_LINE_API_BASE = "https://api.line.me/v2/bot"
_LINE_DATA_API_BASE = "https://api-data.line.me/v2/bot"


class ContentRetrievalError(Exception):
    """Raised when message content cannot be downloaded."""


class ReplyDeliveryError(Exception):
    """Raised when a reply message is not accepted by LINE."""


class LineClient:
    """Thin async wrapper over the two LINE endpoints the pipeline needs."""

    def __init__(
        self,
        channel_token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._channel_token = channel_token
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Authorization": f"Bearer {self._channel_token}"},
            timeout=self._timeout,
            transport=self._transport,
            verify=True,
        )

    async def fetch_content(self, message_id: str) -> bytes:
        """Download the binary content of a message, concatenating the stream."""
        url = f"{_LINE_DATA_API_BASE}/message/{quote(message_id, safe='')}/content"
        chunks: list[bytes] = []
        try:
            async with self._client() as client:
                async with client.stream("GET", url) as resp:
                    if resp.status_code >= 400:
                        raise ContentRetrievalError(
                            f"Content download for message {message_id} "
                            f"returned {resp.status_code}",
                        )
                    async for chunk in resp.aiter_bytes():
                        chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise ContentRetrievalError(
                f"Content download for message {message_id} failed: {exc}",
            ) from exc

        content = b"".join(chunks)
        logger.debug("Downloaded message %s: %d bytes", message_id, len(content))
        return content

    async def reply(self, reply_token: str, text: str) -> None:
        """Send a single text reply using a one-shot reply token."""
        url = f"{_LINE_API_BASE}/message/reply"
        payload = {
            "replyToken": reply_token,
            "messages": [{"type": "text", "text": text}],
        }
        try:
            async with self._client() as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise ReplyDeliveryError(f"Reply request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise ReplyDeliveryError(
                f"Reply rejected with {resp.status_code}: {resp.text[:200]}",
            )
