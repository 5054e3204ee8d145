"""LINE webhook signature verification.

LINE signs each delivery with a base64 HMAC-SHA256 digest of the raw body,
keyed by the channel secret, in the ``x-line-signature`` header. Whether a
failed check rejects the request is a deployment policy.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from collections.abc import Mapping
from enum import Enum

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-line-signature"


class SignaturePolicy(str, Enum):
    OFF = "off"
    ADVISORY = "advisory"
    ENFORCE = "enforce"


class SignatureVerificationError(Exception):
    """Raised when the signature check fails under the enforce policy."""


class SignatureVerifier:
    """Verifies ``x-line-signature`` against the channel secret."""

    def __init__(self, channel_secret: str) -> None:
        self._secret = channel_secret.encode()

    def sign(self, body: bytes) -> str:
        digest = hmac.new(self._secret, body, hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    def verify(self, headers: Mapping[str, str], body: bytes) -> bool:
        """Constant-time comparison of the header against the body digest."""
        signature = headers.get(SIGNATURE_HEADER, "")
        if not signature:
            return False
        return hmac.compare_digest(signature.encode(), self.sign(body).encode())

    def check(
        self,
        headers: Mapping[str, str],
        body: bytes,
        policy: SignaturePolicy,
    ) -> None:
        """Apply ``policy``; raises only when enforcing and verification fails."""
        if policy is SignaturePolicy.OFF:
            if SIGNATURE_HEADER in headers:
                logger.debug("Signature header present, verification disabled")
            else:
                logger.info("No signature header, verification disabled")
            return

        if self.verify(headers, body):
            return

        if policy is SignaturePolicy.ENFORCE:
            logger.warning("Rejecting webhook with invalid signature")
            raise SignatureVerificationError("Invalid webhook signature")

        logger.warning("Webhook signature invalid or missing, proceeding (advisory)")
