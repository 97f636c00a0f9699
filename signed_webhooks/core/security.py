"""
Security utilities for webhook signature validation.

This module provides ECDSA P-256 / SHA-256 signature verification
for Fordefi and Hypernative webhook payloads to ensure authenticity.

Every failure (bad base64, bad DER, mismatch, unexpected error) is
recorded in a VerificationResult for diagnostics and reported to the
caller as a plain ``False``.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from signed_webhooks.core.config import Settings
from signed_webhooks.core.errors import (
    CryptoVerificationFailure,
    KeyFormatError,
    SignatureFormatError,
)
from signed_webhooks.core.keys import load_public_key, read_sender_pem
from signed_webhooks.core.signature_codec import der_to_p1363, p1363_to_der

logger = logging.getLogger(__name__)

SIGNATURE_PREVIEW_CHARS = 20


class Sender(str, Enum):
    """Webhook senders with their own public key."""

    FORDEFI = "fordefi"
    HYPERNATIVE = "hypernative"


class VerificationFailure(str, Enum):
    """Why a signature was not accepted. Internal diagnostics only."""

    MISSING_SIGNATURE = "missing_signature"
    MALFORMED_BASE64 = "malformed_base64"
    MALFORMED_SIGNATURE = "malformed_signature"
    SIGNATURE_MISMATCH = "signature_mismatch"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a single verification attempt."""

    verified: bool
    failure: Optional[VerificationFailure] = None
    detail: str = ""

    @classmethod
    def accepted(cls) -> "VerificationResult":
        return cls(verified=True)

    @classmethod
    def rejected(cls, failure: VerificationFailure, detail: str = "") -> "VerificationResult":
        return cls(verified=False, failure=failure, detail=detail)


def _verify_normalized(
    public_key: ec.EllipticCurvePublicKey,
    payload: bytes,
    normalized_signature: bytes,
) -> None:
    """
    Check a 64-byte P1363 signature over the SHA-256 digest of payload.

    Raises:
        SignatureFormatError: If the normalized signature is malformed.
        CryptoVerificationFailure: If the signature does not match.
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(payload)

    try:
        public_key.verify(
            p1363_to_der(normalized_signature),
            digest.finalize(),
            ec.ECDSA(Prehashed(hashes.SHA256())),
        )
    except InvalidSignature as exc:
        raise CryptoVerificationFailure("ECDSA signature does not match payload") from exc


def check_signature(
    public_key: ec.EllipticCurvePublicKey,
    payload: bytes,
    signature_b64: Optional[str],
) -> VerificationResult:
    """
    Run the full verification pipeline and describe the outcome.

    Args:
        public_key: The sender's P-256 public key.
        payload: The exact bytes that were signed.
        signature_b64: Base64 text of the DER-encoded signature.

    Returns:
        VerificationResult: Accepted, or rejected with the failure kind.
    """
    try:
        return _run_checks(public_key, payload, signature_b64)
    except Exception as exc:
        logger.exception("Unexpected error during signature verification")
        return VerificationResult.rejected(
            VerificationFailure.INTERNAL_ERROR,
            f"{type(exc).__name__}: {exc}",
        )


def _run_checks(
    public_key: ec.EllipticCurvePublicKey,
    payload: bytes,
    signature_b64: Optional[str],
) -> VerificationResult:
    if not signature_b64:
        return VerificationResult.rejected(VerificationFailure.MISSING_SIGNATURE)

    try:
        raw_signature = base64.b64decode(signature_b64.strip(), validate=True)
    except (ValueError, binascii.Error) as exc:
        return VerificationResult.rejected(VerificationFailure.MALFORMED_BASE64, str(exc))

    try:
        normalized = der_to_p1363(raw_signature)
        _verify_normalized(public_key, payload, normalized)
    except SignatureFormatError as exc:
        return VerificationResult.rejected(VerificationFailure.MALFORMED_SIGNATURE, str(exc))
    except CryptoVerificationFailure as exc:
        return VerificationResult.rejected(VerificationFailure.SIGNATURE_MISMATCH, str(exc))

    return VerificationResult.accepted()


def verify(
    public_key: ec.EllipticCurvePublicKey,
    payload: bytes,
    signature_b64: Optional[str],
) -> bool:
    """
    Verify an ECDSA P-256 / SHA-256 webhook signature.

    Args:
        public_key: The sender's P-256 public key.
        payload: The exact bytes that were signed.
        signature_b64: Base64 text of the DER-encoded signature.

    Returns:
        bool: True only if the signature is valid; False for any failure.

    Example:
        >>> key = load_public_key(pem)
        >>> is_valid = verify(key, b"abc", "MEUCIQ...")
    """
    match check_signature(public_key, payload, signature_b64):
        case VerificationResult(verified=True):
            return True
        case _:
            return False


class SignatureVerifier:
    """
    Verifies webhook signatures for a single sender.

    Holds the sender's public key for the process lifetime. Instances
    carry no mutable state and can be shared across concurrent requests.
    """

    def __init__(
        self,
        sender: Sender,
        public_key: ec.EllipticCurvePublicKey,
        preview_bytes: int = 50,
    ) -> None:
        self.sender = sender
        self.public_key = public_key
        self.preview_bytes = preview_bytes

    def check(self, payload: bytes, signature_b64: Optional[str]) -> VerificationResult:
        """Verify and return the detailed result, logging diagnostics."""
        logger.debug(
            f"{self.sender.value} signature verification: "
            f"signature_length={len(signature_b64 or '')}, "
            f"payload_length={len(payload)}, "
            f"signature='{(signature_b64 or '')[:SIGNATURE_PREVIEW_CHARS]}...', "
            f"payload_preview={payload[:self.preview_bytes].decode('utf-8', errors='replace')!r}"
        )

        result = check_signature(self.public_key, payload, signature_b64)

        if result.verified:
            logger.info(f"{self.sender.value} signature verified")
        else:
            logger.warning(
                f"{self.sender.value} signature rejected: "
                f"{result.failure.value} {result.detail}".rstrip()
            )

        return result

    def verify(self, payload: bytes, signature_b64: Optional[str]) -> bool:
        """Return True only if the signature is valid for this sender."""
        return self.check(payload, signature_b64).verified


def build_verifiers(settings: Settings) -> dict[Sender, SignatureVerifier]:
    """
    Load every sender's public key and build its verifier.

    Called once at startup. Any key problem raises KeyFormatError so the
    application refuses to start.

    Args:
        settings: Application settings with key sources.

    Returns:
        dict: Verifier per sender.
    """
    sources = {
        Sender.FORDEFI: (
            settings.fordefi_public_key,
            settings.fordefi_key_file,
            settings.fordefi_log_preview_bytes,
        ),
        Sender.HYPERNATIVE: (
            settings.hypernative_public_key,
            settings.hypernative_key_file,
            settings.hypernative_log_preview_bytes,
        ),
    }

    verifiers: dict[Sender, SignatureVerifier] = {}
    for sender, (env_value, key_file, preview_bytes) in sources.items():
        pem = read_sender_pem(sender.value, env_value, key_file)
        try:
            public_key = load_public_key(pem)
        except KeyFormatError as exc:
            raise KeyFormatError(f"Invalid {sender.value} public key: {exc}") from exc
        verifiers[sender] = SignatureVerifier(sender, public_key, preview_bytes=preview_bytes)

    return verifiers
