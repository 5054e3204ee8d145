"""Derives a meter-style numeric reading from recognized text."""

from __future__ import annotations

import re

from src.webhook.messages import ELLIPSIS, ENGLISH_MESSAGES, ReplyMessages
from src.webhook.models import OcrResult, ReplyPayload

_DIGIT_RUN = re.compile(r"[0-9]+")


def extract_digit_runs(text: str) -> list[str]:
    """Maximal runs of ASCII digits, left to right, duplicates kept."""
    return _DIGIT_RUN.findall(text)


class ReadingParser:
    """Formats OCR output into a reply.

    Digits win over text: any digit run short-circuits the text preview.
    """

    def __init__(
        self,
        preview_chars: int = 50,
        messages: ReplyMessages = ENGLISH_MESSAGES,
    ) -> None:
        if preview_chars <= 0:
            raise ValueError("preview_chars must be positive")
        self.preview_chars = preview_chars
        self.messages = messages

    def format(self, result: OcrResult) -> ReplyPayload:
        text = result.raw_text
        if not text:
            return ReplyPayload(text=self.messages.no_content)

        numbers = extract_digit_runs(text)
        if numbers:
            return ReplyPayload(text=self.messages.numbers_prefix + ", ".join(numbers))

        preview = text[: self.preview_chars]
        return ReplyPayload(text=self.messages.text_prefix + preview + ELLIPSIS)
