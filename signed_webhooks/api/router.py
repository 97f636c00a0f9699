"""
API router aggregating all endpoint routers.
"""

from fastapi import APIRouter

from signed_webhooks.api.endpoints.fordefi import router as fordefi_router
from signed_webhooks.api.endpoints.hypernative import router as hypernative_router

# Main API router
api_router = APIRouter()

# Include endpoint routers
api_router.include_router(fordefi_router)
api_router.include_router(hypernative_router)
