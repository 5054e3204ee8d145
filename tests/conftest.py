"""Shared test fixtures for the LINE webhook service."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import Settings
from src.ocr.extractor import OcrExtractor
from src.webhook.line_client import LineClient
from src.webhook.models import OcrResult

CHANNEL_TOKEN = "test-channel-token"
CHANNEL_SECRET = "test-channel-secret"


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def mock_line_client() -> MagicMock:
    client = MagicMock(spec=LineClient)
    client.reply = AsyncMock(return_value=None)
    client.fetch_content = AsyncMock(return_value=b"\x89PNG fake image")
    return client


@pytest.fixture
def mock_extractor() -> MagicMock:
    extractor = MagicMock(spec=OcrExtractor)
    extractor.extract = AsyncMock(return_value=OcrResult(raw_text="meter 0042 kWh"))
    return extractor


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> Settings:
    defaults: dict[str, Any] = {
        "channel_token": CHANNEL_TOKEN,
        "channel_secret": CHANNEL_SECRET,
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def make_text_event(
    text: str = "hello",
    reply_token: str | None = "t1",
    **kwargs: Any,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": "message",
        "message": {"type": "text", "id": "m-text", "text": text},
    }
    if reply_token is not None:
        event["replyToken"] = reply_token
    event.update(kwargs)
    return event


def make_image_event(
    message_id: str = "m-img",
    reply_token: str | None = "t1",
    **kwargs: Any,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": "message",
        "message": {"type": "image", "id": message_id},
    }
    if reply_token is not None:
        event["replyToken"] = reply_token
    event.update(kwargs)
    return event
