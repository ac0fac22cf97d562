"""Server configuration: reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

# --- Pagination defaults ---
# Module-level constants read at import time so FastAPI Query() defaults
# can reference them (Query defaults must be static at decoration time).
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))

# --- Upload cleanup ---
DEFAULT_ORPHAN_GRACE_HOURS = int(os.getenv("ORPHAN_GRACE_HOURS", "24"))


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Question bank directory (None → the banks shipped with otassess_core)
    question_bank_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Uploads are written here and served (externally) under upload_url_prefix
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    max_upload_bytes: int = 50 * 1024 * 1024

    # Admin API key: shared secret for admin endpoints (None = disabled)
    admin_api_key: str | None = None

    # Trusted proxy secret: when set, every request that carries
    # X-User-ID must also carry X-Proxy-Secret matching this value.
    # The user identity header must come from the gateway, not the client.
    trusted_proxy_secret: str | None = None


@dataclass(frozen=True)
class AISettings:
    """Provider credentials for AI enrichment.

    A provider whose key is unset is simply not configured; the features
    routed to it fail softly (or fall back) instead of erroring at startup.
    """

    openai_api_key: str | None = None
    grok_api_key: str | None = None
    google_api_key: str | None = None

    openai_base_url: str | None = None
    grok_base_url: str | None = None
    gemini_base_url: str | None = None

    # Seconds per provider request; connecting is bounded separately
    timeout_seconds: float = 45.0


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        question_bank_dir=os.getenv("SERVER_QUESTION_BANK_DIR") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        upload_dir=os.getenv("SERVER_UPLOAD_DIR", "uploads"),
        upload_url_prefix=os.getenv("SERVER_UPLOAD_URL_PREFIX", "/uploads"),
        max_upload_bytes=int(os.getenv("SERVER_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024))),
        admin_api_key=os.getenv("ADMIN_API_KEY") or None,
        trusted_proxy_secret=os.getenv("TRUSTED_PROXY_SECRET") or None,
    )


def load_ai_settings() -> AISettings:
    """Build AI provider settings from the environment."""
    return AISettings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        grok_api_key=os.getenv("GROK_API_KEY") or None,
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        grok_base_url=os.getenv("GROK_BASE_URL") or None,
        gemini_base_url=os.getenv("GEMINI_BASE_URL") or None,
        timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", "45")),
    )
