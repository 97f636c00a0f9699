"""
Hypernative webhook endpoint handler.

Hypernative puts its signature in the JSON body (``digitalSignature``)
and signs only the ``data`` string field, not the whole body.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import ValidationError

from signed_webhooks.api.dependencies import get_verifiers
from signed_webhooks.core.security import Sender, SignatureVerifier
from signed_webhooks.schemas.hypernative import HypernativeWebhook

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/hypernative",
    status_code=status.HTTP_200_OK,
    summary="Hypernative Webhook Receiver",
    description="Receives Hypernative risk insights signed with ECDSA P-256 / SHA-256.",
)
async def handle_hypernative_webhook(
    request: Request,
    fordefi_transaction_id: Optional[str] = Header(
        None,
        description="Fordefi transaction the risk insight refers to",
    ),
    verifiers: dict[Sender, SignatureVerifier] = Depends(get_verifiers),
) -> dict[str, Any]:
    """
    Handle incoming Hypernative webhook events.

    Args:
        request: The FastAPI request object.
        fordefi_transaction_id: Value of the fordefi-transaction-id header.
        verifiers: Per-sender verifiers built at startup.

    Returns:
        dict: Response including the transaction ID.

    Raises:
        HTTPException: 400 if the body is empty, not a JSON object, or has no string ``data``.
        HTTPException: 401 if ``digitalSignature`` is missing or invalid.
    """
    logger.info("🔥 Received Hypernative webhook")
    logger.info(f"📋 Transaction ID: {fordefi_transaction_id}")

    body = await request.body()
    if not body:
        logger.error("Empty request body")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty request body",
        )

    try:
        webhook = HypernativeWebhook.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"Failed to parse Hypernative payload: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload",
        )

    if not webhook.digital_signature:
        logger.error("Missing digitalSignature in request body")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing digitalSignature",
        )

    if not isinstance(webhook.data, str):
        logger.error("Missing or non-string data field in request body")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing data field",
        )

    # Only the data field is signed
    try:
        signed_data = webhook.data.encode("utf-8")
    except UnicodeEncodeError as e:
        logger.error(f"data field is not valid UTF-8 text: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid data field",
        )

    if not verifiers[Sender.HYPERNATIVE].verify(signed_data, webhook.digital_signature):
        logger.error("Invalid Hypernative signature")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid signature",
        )

    logger.info(
        "📝 Hypernative Event Data:\n"
        f"{json.dumps(webhook.model_dump(by_alias=True), indent=2)}"
    )

    try:
        risk_insight = json.loads(webhook.data)
    except ValueError as e:
        logger.error(f"Error parsing nested data: {e}")
    else:
        logger.info(f"📊 Parsed Risk Insight:\n{json.dumps(risk_insight, indent=2)}")

    return {
        "status": "success",
        "message": "Hypernative webhook received and processed",
        "transactionId": fordefi_transaction_id,
    }
