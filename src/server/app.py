"""FastAPI application receiving LINE webhook deliveries."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.config import ConfigError, Settings
from src.ocr.extractor import OcrExtractor
from src.ocr.reading import ReadingParser
from src.webhook import ack
from src.webhook.line_client import LineClient
from src.webhook.messages import messages_for
from src.webhook.models import VerificationPing
from src.webhook.normalizer import normalize
from src.webhook.router import EventRouter
from src.webhook.signature import SignatureVerificationError, SignatureVerifier

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables.

    Malformed values (unknown policy, language or locale, non-numeric
    timeouts) raise ConfigError here and stop startup. Missing credentials
    only disable webhook POSTs, see ``create_app``.
    """
    return create_app(Settings.from_env())


def create_app(
    settings: Settings,
    line_client: LineClient | None = None,
    extractor: OcrExtractor | None = None,
) -> FastAPI:
    """Create the webhook app.

    Missing credentials do not stop the app from starting; webhook POSTs
    answer 500 until the deployment is fixed.
    """
    app = FastAPI(docs_url=None, redoc_url=None)

    config_error: ConfigError | None = None
    try:
        settings.require_credentials()
    except ConfigError as exc:
        logger.error("Webhook disabled until configured: %s", exc)
        config_error = exc

    verifier = SignatureVerifier(settings.channel_secret)
    messages = messages_for(settings.reply_locale)
    router = EventRouter(
        line_client=line_client or LineClient(
            settings.channel_token, timeout=settings.line_api_timeout_seconds,
        ),
        extractor=extractor or OcrExtractor(timeout=settings.ocr_timeout_seconds),
        parser=ReadingParser(preview_chars=settings.preview_chars, messages=messages),
        language=settings.ocr_language,
        event_timeout=settings.event_timeout_seconds,
        messages=messages,
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(WEBHOOK_PATH)
    async def verify_probe() -> dict[str, str]:
        logger.debug("GET request - LINE verify")
        return {"status": "ok"}

    @app.post(WEBHOOK_PATH)
    async def webhook(request: Request) -> JSONResponse:
        if config_error is not None:
            logger.error("Rejecting webhook: %s", config_error)
            return ack.respond(config_error)

        try:
            body = await request.body()
            headers = dict(request.headers)
            normalized = normalize(body, headers)
            if isinstance(normalized, VerificationPing):
                logger.info("Acknowledging verification ping (%s)", normalized.reason)
                return ack.respond(normalized)

            try:
                verifier.check(headers, body, settings.signature_policy)
            except SignatureVerificationError as exc:
                return ack.respond(exc)

            outcomes = await router.process(normalized)
        except Exception as exc:
            logger.exception("Unhandled error in webhook")
            return ack.respond(exc)

        logger.info(
            "Processed %d event(s): %s",
            len(outcomes),
            ", ".join(f"{o.index}={o.status.value}" for o in outcomes) or "none",
        )
        return ack.respond(outcomes)

    return app
