"""
Fordefi webhook endpoint handler.

Fordefi signs the raw request body and sends the base64 DER signature
in the ``X-Signature`` header.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from signed_webhooks.api.dependencies import get_verifiers
from signed_webhooks.core.security import Sender, SignatureVerifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/",
    status_code=status.HTTP_200_OK,
    summary="Fordefi Webhook Receiver",
    description="Receives Fordefi events signed with ECDSA P-256 / SHA-256.",
)
async def handle_fordefi_webhook(
    request: Request,
    x_signature: Optional[str] = Header(
        None,
        description="Base64 DER ECDSA signature over the raw body",
    ),
    verifiers: dict[Sender, SignatureVerifier] = Depends(get_verifiers),
) -> dict[str, Any]:
    """
    Handle incoming Fordefi webhook events.

    This endpoint:
    1. Requires the X-Signature header
    2. Verifies the signature over the exact raw body
    3. Parses and logs the event

    Args:
        request: The FastAPI request object.
        x_signature: The base64 DER signature.
        verifiers: Per-sender verifiers built at startup.

    Returns:
        dict: Response indicating the event was received.

    Raises:
        HTTPException: 401 if the signature is missing or invalid.
        HTTPException: 400 if the body is empty or not JSON.
    """
    if not x_signature:
        logger.error("Missing X-Signature header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing signature",
        )

    # Raw bytes exactly as signed
    payload = await request.body()
    if not payload:
        logger.error("Empty request body")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty request body",
        )

    # Validate webhook signature - CRITICAL SECURITY CHECK
    if not verifiers[Sender.FORDEFI].verify(payload, x_signature):
        logger.error("Invalid Fordefi signature")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid signature",
        )

    try:
        event = json.loads(payload)
    except ValueError as e:
        logger.error(f"Failed to parse Fordefi payload: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload",
        )

    logger.info(f"📝 Received Fordefi event:\n{json.dumps(event, indent=2)}")

    return {
        "status": "success",
        "message": "Webhook received and processed",
    }
