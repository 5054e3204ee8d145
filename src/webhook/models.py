"""Data models for the LINE webhook pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

# --- Inbound wire models ---


class MessageContent(BaseModel):
    """Message body of a LINE message event. Only text and image are handled."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    id: str | None = None
    text: str | None = None


class LineEvent(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    replyToken: str | None = None
    message: MessageContent | None = None


# --- Normalizer results ---


@dataclass(frozen=True)
class VerificationPing:
    """Request carrying nothing to dispatch, e.g. LINE's endpoint verification."""

    reason: str


@dataclass(frozen=True)
class WebhookBatch:
    """Ordered raw events from one webhook delivery."""

    events: list[dict[str, Any]] = field(default_factory=list)


# --- Per-event results ---


@dataclass(frozen=True)
class OcrResult:
    raw_text: str


@dataclass(frozen=True)
class ReplyPayload:
    text: str


class OutcomeStatus(str, Enum):
    REPLIED = "replied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class EventOutcome:
    """Observability record for one event; never drives the HTTP status."""

    index: int
    status: OutcomeStatus
    reason: str | None = None

    @classmethod
    def replied(cls, index: int) -> EventOutcome:
        return cls(index=index, status=OutcomeStatus.REPLIED)

    @classmethod
    def skipped(cls, index: int, reason: str) -> EventOutcome:
        return cls(index=index, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, index: int, reason: str) -> EventOutcome:
        return cls(index=index, status=OutcomeStatus.FAILED, reason=reason)
