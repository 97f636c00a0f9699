"""Core module containing configuration, key loading and signature verification."""

from signed_webhooks.core.config import Settings, get_settings
from signed_webhooks.core.errors import (
    CryptoVerificationFailure,
    KeyFormatError,
    SignatureFormatError,
    WebhookSecurityError,
)
from signed_webhooks.core.keys import load_public_key
from signed_webhooks.core.security import Sender, SignatureVerifier, verify
from signed_webhooks.core.signature_codec import der_to_p1363, p1363_to_der

__all__ = [
    "CryptoVerificationFailure",
    "KeyFormatError",
    "Sender",
    "Settings",
    "SignatureFormatError",
    "SignatureVerifier",
    "WebhookSecurityError",
    "der_to_p1363",
    "get_settings",
    "load_public_key",
    "p1363_to_der",
    "verify",
]
