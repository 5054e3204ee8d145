"""Turns a raw webhook body into a batch of events or a verification ping."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from src.webhook.models import VerificationPing, WebhookBatch

logger = logging.getLogger(__name__)


def normalize(
    raw_body: bytes, headers: Mapping[str, str] | None = None,
) -> WebhookBatch | VerificationPing:
    """Parse a webhook body without ever failing.

    Every unusable body becomes a ``VerificationPing``.
    """
    if not raw_body or not raw_body.strip():
        return VerificationPing(reason="empty body")

    try:
        parsed = json.loads(raw_body)
    except (ValueError, RecursionError):
        # JSONDecodeError and UnicodeDecodeError are ValueErrors too
        logger.debug("Webhook body is not valid JSON (%d bytes)", len(raw_body))
        return VerificationPing(reason="unparseable body")

    if not isinstance(parsed, dict):
        return VerificationPing(reason="body is not a JSON object")

    events = parsed.get("events")
    if not isinstance(events, list):
        return VerificationPing(reason="no events array")

    return WebhookBatch(events=list(events))
