from __future__ import annotations

import os
from dataclasses import dataclass

STORE_NAME = "panera-db"
DOCUMENT_KEY = "db"

DEFAULT_API_URL = "https://api.netlify.com"

# First non-empty value wins.
SITE_ID_ENV_NAMES = ("NETLIFY_SITE_ID", "SITE_ID", "PANERA_BLOBS_SITE_ID")
TOKEN_ENV_NAMES = ("NETLIFY_BLOBS_TOKEN", "NETLIFY_AUTH_TOKEN", "NETLIFY_API_TOKEN", "PANERA_BLOBS_TOKEN")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _first_env(names: tuple[str, ...]) -> str | None:
    for name in names:
        raw = (os.getenv(name) or "").strip()
        if raw:
            return raw
    return None


@dataclass(frozen=True)
class Settings:
    # Auth (None -> open mode)
    auth_secret: str | None = None

    # Platform-injected blobs context (base64 JSON)
    blobs_context: str | None = None

    # Explicit blobs access
    site_id: str | None = None
    blobs_token: str | None = None
    api_url: str = DEFAULT_API_URL
    blobs_timeout: float = 15.0

    # Where the document lives
    store_name: str = STORE_NAME
    document_key: str = DOCUMENT_KEY

    # HTTP
    cors_allow_origins: tuple[str, ...] = ("*",)

    # Debug
    debug_log_requests: bool = False


def get_settings() -> Settings:
    # An empty PANERA_AUTH means "not configured", same as unset.
    auth_secret = os.getenv("PANERA_AUTH") or None

    blobs_context = (os.getenv("NETLIFY_BLOBS_CONTEXT") or "").strip() or None
    site_id = _first_env(SITE_ID_ENV_NAMES)
    blobs_token = _first_env(TOKEN_ENV_NAMES)
    api_url = (os.getenv("NETLIFY_API_URL") or DEFAULT_API_URL).rstrip("/")
    blobs_timeout = _env_float("BLOBS_TIMEOUT_SECONDS", 15.0)

    raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
    cors_allow_origins = tuple(o.strip() for o in raw_origins.split(",") if o.strip()) or ("*",)

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", False)

    return Settings(
        auth_secret=auth_secret,
        blobs_context=blobs_context,
        site_id=site_id,
        blobs_token=blobs_token,
        api_url=api_url,
        blobs_timeout=blobs_timeout,
        cors_allow_origins=cors_allow_origins,
        debug_log_requests=debug_log_requests,
    )
