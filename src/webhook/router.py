"""Per-event dispatch for a webhook batch.

Every event runs in its own task and resolves to an ``EventOutcome``; no
failure in one event reaches its siblings or the batch.

Dispatch:
1. Validate the raw event into a ``LineEvent``
2. Route message events by content type (text, image)
3. Image: download -> OCR -> reading -> reply, with a fallback reply on error
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from src.ocr.extractor import LanguageHint, OcrExtractor
from src.ocr.reading import ReadingParser
from src.webhook.line_client import LineClient, ReplyDeliveryError
from src.webhook.messages import ENGLISH_MESSAGES, ReplyMessages
from src.webhook.models import EventOutcome, LineEvent, WebhookBatch

logger = logging.getLogger(__name__)


class EventRouter:
    """Fans a batch out to per-event handlers and collects their outcomes."""

    def __init__(
        self,
        line_client: LineClient,
        extractor: OcrExtractor,
        parser: ReadingParser,
        language: LanguageHint = LanguageHint.ENGLISH,
        event_timeout: float = 45.0,
        messages: ReplyMessages = ENGLISH_MESSAGES,
    ) -> None:
        self._line = line_client
        self._extractor = extractor
        self._parser = parser
        self._language = language
        self._event_timeout = event_timeout
        self._messages = messages

    async def process(self, batch: WebhookBatch) -> list[EventOutcome]:
        """Handle all events concurrently; outcomes keep batch order."""
        logger.info("Processing %d event(s)", len(batch.events))
        tasks = [
            self._run_event(index, raw)
            for index, raw in enumerate(batch.events)
        ]
        return list(await asyncio.gather(*tasks))

    async def _run_event(self, index: int, raw: Any) -> EventOutcome:
        try:
            return await asyncio.wait_for(
                self._dispatch(index, raw), timeout=self._event_timeout,
            )
        except TimeoutError:
            logger.error("[Event %d] Timed out after %ss", index, self._event_timeout)
            return EventOutcome.failed(index, "timed out")
        except Exception as exc:
            logger.exception("[Event %d] Unhandled error", index)
            return EventOutcome.failed(index, f"unhandled error: {exc}")

    async def _dispatch(self, index: int, raw: Any) -> EventOutcome:
        try:
            event = LineEvent.model_validate(raw)
        except ValidationError as exc:
            logger.warning("[Event %d] Malformed event: %s", index, exc.error_count())
            return EventOutcome.failed(index, "malformed event")

        logger.debug("[Event %d] Type: %s", index, event.type)
        if event.type != "message" or event.message is None:
            return EventOutcome.skipped(index, f"unsupported event type {event.type!r}")

        message_type = event.message.type
        logger.debug("[Event %d] Message type: %s", index, message_type)
        if message_type == "text":
            return await self._handle_text(index, event)
        if message_type == "image":
            return await self._handle_image(index, event)
        return EventOutcome.skipped(index, f"unsupported message type {message_type!r}")

    async def _handle_text(self, index: int, event: LineEvent) -> EventOutcome:
        if not event.replyToken:
            logger.debug("[Event %d] No replyToken (test request)", index)
            return EventOutcome.skipped(index, "no reply token")

        text = event.message.text if event.message and event.message.text else ""
        try:
            reply_text = self._messages.text_ack_template.format(text=text)
            await self._line.reply(event.replyToken, reply_text)
        except ReplyDeliveryError as exc:
            logger.error("[Event %d] Reply error: %s", index, exc)
            return EventOutcome.failed(index, "reply delivery failed")

        logger.debug("[Event %d] Reply sent", index)
        return EventOutcome.replied(index)

    async def _handle_image(self, index: int, event: LineEvent) -> EventOutcome:
        if not event.replyToken:
            logger.debug("[Event %d] No replyToken (test request)", index)
            return EventOutcome.skipped(index, "no reply token")

        message_id = event.message.id if event.message else None
        label = f"[Event {index}] "
        try:
            if not message_id:
                raise ValueError("image message has no id")
            image = await self._line.fetch_content(message_id)
            logger.debug("[Event %d] Image downloaded: %d bytes", index, len(image))
            result = await self._extractor.extract(image, self._language, label=label)
            payload = self._parser.format(result)
            await self._line.reply(event.replyToken, payload.text)
        except Exception as exc:
            logger.error("[Event %d] Image processing error: %s", index, exc)
            await self._send_fallback(index, event.replyToken)
            return EventOutcome.failed(index, f"image processing failed: {type(exc).__name__}")

        logger.debug("[Event %d] Reading reply sent", index)
        return EventOutcome.replied(index)

    async def _send_fallback(self, index: int, reply_token: str) -> None:
        try:
            await self._line.reply(reply_token, self._messages.image_failure)
        except ReplyDeliveryError as exc:
            logger.error("[Event %d] Fallback reply error: %s", index, exc)
