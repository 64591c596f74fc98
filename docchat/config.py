"""Gateway and client configuration with environment variable loading.

Pydantic-based settings for the document store, the language model
endpoint and the UI's API client.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()

MAX_UPLOAD_SIZE = 100 * 1024 * 1024  # 100MB
ALLOWED_MIME_TYPES = frozenset({"application/pdf", "text/plain"})
DEFAULT_PAGE_SIZE = 10


class ServerConfig(BaseModel):
    """HTTP server settings.

    Attributes:
        frontend_url: Origin allowed by CORS.
        host: Interface the server binds to.
        port: Port the server listens on.
    """

    model_config = ConfigDict(validate_default=True)

    frontend_url: str = Field(
        default_factory=lambda: os.getenv("FRONTEND_URL", "http://localhost:3000"),
        description="CORS allow-origin",
    )
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "3001")),
        ge=1,
        le=65535,
    )


class GatewayConfig(BaseModel):
    """Configuration for the request gateway.

    Attributes:
        document_store_url: Base URL of the document store API.
        document_store_api_key: API key sent to the document store.
        language_model_url: Chat-completions endpoint of the language model.
        language_model_name: Model identifier sent with each completion.
        language_model_api_key: Optional bearer token for the language model.
        upstream_timeout: Seconds allowed for each upstream call.
        upload_dir: Directory for temporary upload files.
        max_upload_size: Largest accepted upload in bytes.
    """

    model_config = ConfigDict(validate_default=True)

    document_store_url: str = Field(
        default_factory=lambda: os.getenv("SUPAVEC_API_URL", "https://api.supavec.com"),
        description="Document store base URL",
    )
    document_store_api_key: str = Field(
        default_factory=lambda: os.getenv("SUPAVEC_API_KEY", ""),
        description="API key for the document store",
    )
    language_model_url: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_API_URL", "https://llama3b.gaia.domains/v1/chat/completions"
        ),
        description="Chat-completions endpoint",
    )
    language_model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "llama"),
        description="Model to use",
    )
    language_model_api_key: str | None = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY") or None,
        description="Bearer token for the language model (None for keyless endpoints)",
    )
    upstream_timeout: float = Field(
        default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT", "60")),
        gt=0.0,
        description="Timeout in seconds for each upstream call",
    )
    upload_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("UPLOAD_DIR", "uploads")),
        description="Scratch directory for uploads in flight",
    )
    max_upload_size: int = Field(default=MAX_UPLOAD_SIZE, ge=1)

    @field_validator("document_store_api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that the document store API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("SUPAVEC_API_KEY is required. Set it in .env")
        return v.strip()

    @field_validator("document_store_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class ClientConfig(BaseModel):
    """Configuration for the UI's API client.

    Attributes:
        api_base_url: Client-facing base URL of the gateway routes.
        timeout: Seconds allowed for each gateway call.
        page_size: Files requested per page.
    """

    model_config = ConfigDict(validate_default=True)

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:3001/api"),
    )
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("CLIENT_TIMEOUT", "120")),
        gt=0.0,
    )
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def get_server_config() -> ServerConfig:
    return ServerConfig()


def get_gateway_config() -> GatewayConfig:
    """Create gateway configuration from environment.

    Returns:
        Configured GatewayConfig instance.

    Raises:
        ValueError: If SUPAVEC_API_KEY is not set.
    """
    return GatewayConfig()


def get_client_config() -> ClientConfig:
    """Create client configuration from environment."""
    return ClientConfig()
