"""Acknowledgment policy: the HTTP answer LINE sees for a delivery.

Per-event failures never change the status. Only deployment problems (500)
and enforced signature failures (401) leave the 2xx range.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from fastapi.responses import JSONResponse

from src.config import ConfigError
from src.webhook.models import EventOutcome, OutcomeStatus, VerificationPing
from src.webhook.signature import SignatureVerificationError


def acknowledge_ping(ping: VerificationPing) -> JSONResponse:
    return JSONResponse({"ok": True}, status_code=200)


def acknowledge_batch(outcomes: list[EventOutcome]) -> JSONResponse:
    counts = Counter(outcome.status for outcome in outcomes)
    body: dict[str, Any] = {
        "ok": True,
        "processed": True,
        "eventCount": len(outcomes),
        "outcomes": {status.value: counts.get(status, 0) for status in OutcomeStatus},
    }
    return JSONResponse(body, status_code=200)


def config_error() -> JSONResponse:
    return JSONResponse({"error": "Server configuration error"}, status_code=500)


def signature_rejected() -> JSONResponse:
    return JSONResponse({"error": "Invalid webhook signature"}, status_code=401)


def unexpected_error() -> JSONResponse:
    """Already-accepted traffic is acknowledged even when the handler breaks."""
    return JSONResponse(
        {"ok": True, "error": "Internal error but acknowledged"},
        status_code=200,
    )


def respond(outcome: VerificationPing | list[EventOutcome] | Exception) -> JSONResponse:
    """Map a pipeline result (or the error that ended it) to a response."""
    if isinstance(outcome, VerificationPing):
        return acknowledge_ping(outcome)
    if isinstance(outcome, ConfigError):
        return config_error()
    if isinstance(outcome, SignatureVerificationError):
        return signature_rejected()
    if isinstance(outcome, Exception):
        return unexpected_error()
    return acknowledge_batch(outcome)
