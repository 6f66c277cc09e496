"""Application settings using Pydantic BaseSettings."""

import os
import re

from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_DATABASE_URL = "sqlite+aiosqlite:///./calls.db"


def get_async_database_url() -> str:
    """Get database URL converted for the asyncpg driver."""
    url = os.environ.get("DATABASE_URL", "") or settings.database_url
    if not url:
        return LOCAL_DATABASE_URL
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = ""

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    # Business calendar (single business timezone for every tenant)
    business_timezone: str = "America/Phoenix"

    # Phone lines without a mapping are answered as this client
    default_client_id: str = "tex-intel-primary"

    # Vapi
    vapi_api_key: str = ""
    vapi_api_base_url: str = "https://api.vapi.ai"
    vapi_webhook_secret: str | None = None
    control_request_timeout_seconds: float = 10.0

    # Public base URL the voice runtime calls back into
    server_url: str = "http://localhost:8000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
