"""
Public key loading for webhook senders.

Keys arrive as PEM-armored SubjectPublicKeyInfo, either from an
environment variable (often with literal ``\\n`` escapes) or from a
``.pem`` file. Only EC keys on curve P-256 are accepted.
"""

import base64
import binascii
import logging
import re
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from signed_webhooks.core.errors import KeyFormatError

logger = logging.getLogger(__name__)

PEM_HEADER = "-----BEGIN PUBLIC KEY-----"
PEM_FOOTER = "-----END PUBLIC KEY-----"

_WHITESPACE = re.compile(r"\s+")


def load_public_key(pem: str) -> ec.EllipticCurvePublicKey:
    """
    Parse a PEM-encoded SPKI public key bound to curve P-256.

    Args:
        pem: PEM text, with real newlines or literal ``\\n`` sequences.

    Returns:
        ec.EllipticCurvePublicKey: The immutable verification key.

    Raises:
        KeyFormatError: If the base64 or ASN.1 is malformed, the key is
            not an EC key, or the curve is not P-256.
    """
    if not pem or not pem.strip():
        raise KeyFormatError("Public key is empty")

    normalized = pem.replace("\\n", "\n")
    body = normalized.replace(PEM_HEADER, "").replace(PEM_FOOTER, "")
    body = _WHITESPACE.sub("", body)

    try:
        der = base64.b64decode(body, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise KeyFormatError(f"Invalid base64 in public key: {exc}") from exc

    if not der:
        raise KeyFormatError("Public key has no content between PEM markers")

    try:
        public_key = serialization.load_der_public_key(der)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyFormatError(f"Invalid SubjectPublicKeyInfo: {exc}") from exc

    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise KeyFormatError(
            f"Expected an EC public key, got {type(public_key).__name__}"
        )

    if not isinstance(public_key.curve, ec.SECP256R1):
        raise KeyFormatError(
            f"Expected curve P-256 (secp256r1), got {public_key.curve.name}"
        )

    return public_key


def read_sender_pem(name: str, env_value: str | None, key_file: Path) -> str:
    """
    Resolve a sender's PEM text, preferring the environment over the key file.

    Args:
        name: Sender name, for logging.
        env_value: PEM taken from the environment, if set.
        key_file: Fallback ``.pem`` file path.

    Returns:
        str: The PEM text.

    Raises:
        KeyFormatError: If neither source provides a key.
    """
    if env_value:
        logger.info(f"✅ Loaded {name} public key from environment variable")
        return env_value

    try:
        pem = key_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise KeyFormatError(
            f"No {name} public key in environment and {key_file} is not readable: {exc}"
        ) from exc

    logger.info(f"✅ Loaded {name} public key from file {key_file}")
    return pem
