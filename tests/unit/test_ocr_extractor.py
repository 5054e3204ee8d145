"""Tests for the OCR extractor contract."""

from __future__ import annotations

import io
import time
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image, UnidentifiedImageError

from src.ocr.extractor import (
    InvalidInputError,
    LanguageHint,
    OcrExtractor,
    RecognitionFailedError,
    TesseractEngine,
)


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (20, 10), color="white").save(buf, format="PNG")
    return buf.getvalue()


class TestOcrExtractor:
    @pytest.mark.asyncio
    async def test_empty_buffer_is_invalid_input(self) -> None:
        engine = MagicMock()
        extractor = OcrExtractor(engine=engine)
        with pytest.raises(InvalidInputError):
            await extractor.extract(b"", LanguageHint.ENGLISH)
        engine.recognize.assert_not_called()

    @pytest.mark.asyncio
    async def test_output_is_trimmed_only(self) -> None:
        engine = MagicMock()
        engine.recognize.return_value = "\n  Meter 0042 kWh.  \n\f"
        result = await OcrExtractor(engine=engine).extract(b"img", LanguageHint.ENGLISH)
        assert result.raw_text == "Meter 0042 kWh."

    @pytest.mark.asyncio
    async def test_language_hint_passed_to_engine(self) -> None:
        engine = MagicMock()
        engine.recognize.return_value = "x"
        await OcrExtractor(engine=engine).extract(b"img", LanguageHint.ENGLISH_THAI)
        args = engine.recognize.call_args[0]
        assert args[0] == b"img"
        assert args[1] is LanguageHint.ENGLISH_THAI

    @pytest.mark.asyncio
    async def test_engine_failure_is_recognition_failed(self) -> None:
        engine = MagicMock()
        engine.recognize.side_effect = OSError("tesseract not installed")
        with pytest.raises(RecognitionFailedError, match="tesseract not installed"):
            await OcrExtractor(engine=engine).extract(b"img")

    @pytest.mark.asyncio
    async def test_slow_engine_times_out(self) -> None:
        def slow(*_args: object) -> str:
            time.sleep(0.5)
            return "late"

        engine = MagicMock()
        engine.recognize.side_effect = slow
        with pytest.raises(RecognitionFailedError, match="timed out"):
            await OcrExtractor(engine=engine, timeout=0.05).extract(b"img")

    @pytest.mark.asyncio
    async def test_empty_recognition_is_empty_text(self) -> None:
        engine = MagicMock()
        engine.recognize.return_value = "   "
        result = await OcrExtractor(engine=engine).extract(b"img")
        assert result.raw_text == ""


class TestTesseractEngine:
    def test_calls_pytesseract_with_language(self) -> None:
        statuses: list[str] = []
        with patch(
            "src.ocr.extractor.pytesseract.image_to_string", return_value="123",
        ) as mock_ocr:
            text = TesseractEngine().recognize(
                _png_bytes(), LanguageHint.ENGLISH_THAI, statuses.append,
            )
        assert text == "123"
        assert mock_ocr.call_args[1]["lang"] == "eng+tha"
        assert statuses == ["loading image", "recognizing text", "done"]

    def test_undecodable_image_raises(self) -> None:
        with pytest.raises(UnidentifiedImageError):
            TesseractEngine().recognize(b"not an image", LanguageHint.ENGLISH)

    def test_timeout_passed_to_pytesseract(self) -> None:
        with patch(
            "src.ocr.extractor.pytesseract.image_to_string", return_value="",
        ) as mock_ocr:
            TesseractEngine(timeout=7).recognize(_png_bytes(), LanguageHint.ENGLISH)
        assert mock_ocr.call_args[1]["timeout"] == 7


class TestDefaultEngineTimeout:
    @pytest.mark.asyncio
    async def test_extractor_timeout_reaches_tesseract(self) -> None:
        with patch(
            "src.ocr.extractor.pytesseract.image_to_string", return_value="0042",
        ) as mock_ocr:
            result = await OcrExtractor(timeout=7).extract(_png_bytes())
        assert result.raw_text == "0042"
        assert mock_ocr.call_args[1]["timeout"] == 7

    @pytest.mark.asyncio
    async def test_killed_tesseract_is_recognition_failed(self) -> None:
        with patch(
            "src.ocr.extractor.pytesseract.image_to_string",
            side_effect=RuntimeError("Tesseract process timeout"),
        ):
            with pytest.raises(RecognitionFailedError, match="process timeout"):
                await OcrExtractor(timeout=7).extract(_png_bytes())
