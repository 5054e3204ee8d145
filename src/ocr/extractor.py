"""OCR extraction: input contract and trimming around a recognition engine."""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol

import pytesseract
from PIL import Image

from src.webhook.models import OcrResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class LanguageHint(str, Enum):
    """Tesseract language sets the recognizer may consider."""

    ENGLISH = "eng"
    ENGLISH_THAI = "eng+tha"


class InvalidInputError(Exception):
    """Raised when the extractor is handed an unusable image buffer."""


class RecognitionFailedError(Exception):
    """Raised when the recognition engine fails or times out."""


class RecognitionEngine(Protocol):
    def recognize(
        self,
        image: bytes,
        language: LanguageHint,
        progress: ProgressCallback | None = None,
    ) -> str: ...


class TesseractEngine:
    """Recognition engine backed by the local tesseract binary."""

    def __init__(self, config: str = "", timeout: float = 0) -> None:
        # tesseract is killed after `timeout` seconds; 0 disables the limit
        self._config = config
        self._timeout = timeout

    def recognize(
        self,
        image: bytes,
        language: LanguageHint,
        progress: ProgressCallback | None = None,
    ) -> str:
        notify = progress or (lambda _status: None)
        notify("loading image")
        with Image.open(io.BytesIO(image)) as img:
            rgb = img.convert("RGB")
        notify("recognizing text")
        text = pytesseract.image_to_string(
            rgb, lang=language.value, config=self._config, timeout=self._timeout,
        )
        notify("done")
        return text


class OcrExtractor:
    def __init__(
        self,
        engine: RecognitionEngine | None = None,
        timeout: float = 20.0,
    ) -> None:
        self._engine = engine or TesseractEngine(timeout=timeout)
        self._timeout = timeout

    async def extract(
        self,
        image: bytes,
        language: LanguageHint = LanguageHint.ENGLISH,
        label: str = "",
    ) -> OcrResult:
        """Recognize text in ``image`` and return it whitespace-trimmed.

        Engine work runs in a worker thread so concurrent events keep
        progressing; ``label`` only tags log lines.
        """
        if not image:
            raise InvalidInputError("Image buffer is empty")

        def on_progress(status: str) -> None:
            logger.debug("%sOCR: %s", label, status)

        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._engine.recognize, image, language, on_progress),
                timeout=self._timeout,
            )
        except TimeoutError as exc:
            raise RecognitionFailedError(
                f"Recognition timed out after {self._timeout}s",
            ) from exc
        except Exception as exc:
            raise RecognitionFailedError(f"Recognition failed: {exc}") from exc

        result = OcrResult(raw_text=(text or "").strip())
        logger.debug("%sOCR result: %r", label, result.raw_text)
        return result
