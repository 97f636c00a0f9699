"""
Request dependencies shared by webhook endpoints.
"""

import logging

from fastapi import HTTPException, Request, status

from signed_webhooks.core.security import Sender, SignatureVerifier

logger = logging.getLogger(__name__)


def get_verifiers(request: Request) -> dict[Sender, SignatureVerifier]:
    """
    Return the per-sender verifiers built at startup.

    Raises:
        HTTPException: 503 if the application started without verifiers.
    """
    verifiers = getattr(request.app.state, "verifiers", None)
    if not verifiers:
        logger.error("❌ Signature verifiers are not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Signature verification unavailable",
        )
    return verifiers
