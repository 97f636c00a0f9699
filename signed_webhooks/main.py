"""
Signed Webhooks - ECDSA-authenticated webhook receiver.

Main FastAPI application entry point.
Receives Fordefi and Hypernative webhooks and rejects any call whose
ECDSA P-256 signature does not verify against the sender's public key.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from signed_webhooks.api.router import api_router
from signed_webhooks.core.config import Settings, get_settings
from signed_webhooks.core.errors import KeyFormatError
from signed_webhooks.core.security import build_verifiers

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - [API] - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Loads each sender's public key before any request is served.
    A missing or malformed key aborts startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        None
    """
    app_settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {app_settings.app_name}...")
    logger.info(f"Debug mode: {app_settings.debug}")

    try:
        app.state.verifiers = build_verifiers(app_settings)
    except KeyFormatError as e:
        logger.error(f"❌ Error loading public keys: {e}")
        raise

    base_url = f"http://{app_settings.api_host}:{app_settings.api_port}"
    logger.info(f"📝 Fordefi webhook endpoint: {base_url}/")
    logger.info(f"🔥 Hypernative webhook endpoint: {base_url}/hypernative")
    logger.info(f"💚 Health check endpoint: {base_url}/health")

    yield

    # Shutdown
    logger.info(f"Shutting down {app_settings.app_name}...")
    app.state.verifiers = None


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use. Defaults to the cached environment settings.

    Returns:
        FastAPI: The configured application instance.
    """
    app_settings = app_settings or get_settings()

    app = FastAPI(
        title=app_settings.app_name,
        description="Receives Fordefi and Hypernative webhooks authenticated with ECDSA P-256.",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
    )
    app.state.settings = app_settings

    # Include API routes
    app.include_router(api_router)

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "signed_webhooks.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
