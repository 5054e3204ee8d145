"""Process configuration loaded once from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from src.ocr.extractor import LanguageHint
from src.webhook.messages import ReplyLocale
from src.webhook.signature import SignaturePolicy


class ConfigError(Exception):
    """Raised when the deployment is missing or misstates required settings."""


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    channel_token: str
    channel_secret: str
    signature_policy: SignaturePolicy = SignaturePolicy.OFF
    ocr_language: LanguageHint = LanguageHint.ENGLISH
    ocr_timeout_seconds: float = 20.0
    line_api_timeout_seconds: float = 10.0
    event_timeout_seconds: float = 45.0
    preview_chars: int = 50
    reply_locale: ReplyLocale = ReplyLocale.ENGLISH

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from the environment (or an explicit mapping).

        Credentials are read but not validated here; call
        ``require_credentials`` before serving traffic.
        """
        env = os.environ if env is None else env

        policy_raw = env.get("LINE_SIGNATURE_POLICY", SignaturePolicy.OFF.value)
        try:
            policy = SignaturePolicy(policy_raw.strip().lower())
        except ValueError as exc:
            choices = ", ".join(p.value for p in SignaturePolicy)
            raise ConfigError(
                f"LINE_SIGNATURE_POLICY must be one of {choices}, got {policy_raw!r}",
            ) from exc

        language_raw = env.get("OCR_LANGUAGE", LanguageHint.ENGLISH.value)
        try:
            language = LanguageHint(language_raw.strip())
        except ValueError as exc:
            choices = ", ".join(h.value for h in LanguageHint)
            raise ConfigError(
                f"OCR_LANGUAGE must be one of {choices}, got {language_raw!r}",
            ) from exc

        locale_raw = env.get("REPLY_LOCALE", ReplyLocale.ENGLISH.value)
        try:
            locale = ReplyLocale(locale_raw.strip().lower())
        except ValueError as exc:
            choices = ", ".join(loc.value for loc in ReplyLocale)
            raise ConfigError(
                f"REPLY_LOCALE must be one of {choices}, got {locale_raw!r}",
            ) from exc

        return cls(
            channel_token=env.get("LINE_CHANNEL_TOKEN", ""),
            channel_secret=env.get("LINE_CHANNEL_SECRET", ""),
            signature_policy=policy,
            ocr_language=language,
            ocr_timeout_seconds=_float_env(env, "OCR_TIMEOUT_SECONDS", 20.0),
            line_api_timeout_seconds=_float_env(env, "LINE_API_TIMEOUT_SECONDS", 10.0),
            event_timeout_seconds=_float_env(env, "EVENT_TIMEOUT_SECONDS", 45.0),
            preview_chars=_int_env(env, "READING_PREVIEW_CHARS", 50),
            reply_locale=locale,
        )

    def require_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("LINE_CHANNEL_TOKEN", self.channel_token),
                ("LINE_CHANNEL_SECRET", self.channel_secret),
            )
            if not value.strip()
        ]
        if missing:
            raise ConfigError(f"Missing required credentials: {', '.join(missing)}")
