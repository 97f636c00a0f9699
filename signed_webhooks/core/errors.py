"""
Error types raised by the signature verification subsystem.

KeyFormatError is fatal and only raised while loading keys at startup.
SignatureFormatError and CryptoVerificationFailure are per-request and
never escape the verifier: they are folded into a failed verification.
"""


class WebhookSecurityError(Exception):
    """Base class for signature verification errors."""


class KeyFormatError(WebhookSecurityError):
    """Public key is malformed, not EC, or not on curve P-256."""


class SignatureFormatError(WebhookSecurityError):
    """Signature bytes are not a valid encoding of a P-256 ECDSA signature."""


class CryptoVerificationFailure(WebhookSecurityError):
    """Signature is well-formed but does not match the payload and key."""
