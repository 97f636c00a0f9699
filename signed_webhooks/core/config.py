"""
Application configuration using Pydantic Settings.

Loads environment variables for the server binding and for the
public keys used to validate Fordefi and Hypernative webhooks.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        debug: Enable debug mode.
        api_host: Host to bind the API server.
        api_port: Port to bind the API server.
        fordefi_public_key: Fordefi webhook public key (PEM format).
        hypernative_public_key: Hypernative webhook public key (PEM format).
        keys_dir: Directory holding fallback ``.pem`` key files.
        fordefi_log_preview_bytes: Payload bytes shown in Fordefi debug logs.
        hypernative_log_preview_bytes: Payload bytes shown in Hypernative debug logs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = Field(default="Signed Webhooks", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server Configuration
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(
        default=8080,
        description="API server port",
        validation_alias=AliasChoices("api_port", "port"),
    )

    # Sender public keys. Environment takes precedence over files in keys_dir.
    fordefi_public_key: Optional[str] = Field(
        default=None,
        description="Fordefi public key in PEM format",
        json_schema_extra={"env": "FORDEFI_PUBLIC_KEY"},
    )
    hypernative_public_key: Optional[str] = Field(
        default=None,
        description="Hypernative public key in PEM format",
        json_schema_extra={"env": "HYPERNATIVE_PUBLIC_KEY"},
    )
    keys_dir: Path = Field(
        default=Path("keys"),
        description="Directory with fordefi_public_key.pem and hypernative_public_key.pem",
    )

    # Diagnostics
    fordefi_log_preview_bytes: int = Field(default=50, ge=0)
    hypernative_log_preview_bytes: int = Field(default=100, ge=0)

    @property
    def fordefi_key_file(self) -> Path:
        return self.keys_dir / "fordefi_public_key.pem"

    @property
    def hypernative_key_file(self) -> Path:
        return self.keys_dir / "hypernative_public_key.pem"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
