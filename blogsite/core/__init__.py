"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    CONTENT_STORE,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    FRONTEND_ORIGIN,
    FRONTEND_ORIGINS,
    GITHUB_CLIENT_ID,
    GITHUB_CLIENT_SECRET,
    LOG_LEVEL,
    OAUTH_REDIRECT_URL,
    PAGE_CACHE_MAX_ENTRIES,
    REVALIDATE_SECONDS,
    SANITY_API_TOKEN,
    SANITY_API_VERSION,
    SANITY_DATASET,
    SANITY_PROJECT_ID,
    SANITY_USE_CDN,
    SECRET_KEY,
    SESSION_MAX_AGE,
    UNKNOWN_PROVIDER_POLICY,
    UPLOAD_DIR,
)
from .database import engine
from .logging_config import configure_logging
from .time import isoformat, utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "CONTENT_STORE",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DB_RESET",
    "FRONTEND_ORIGIN",
    "FRONTEND_ORIGINS",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "LOG_LEVEL",
    "OAUTH_REDIRECT_URL",
    "PAGE_CACHE_MAX_ENTRIES",
    "REVALIDATE_SECONDS",
    "SANITY_API_TOKEN",
    "SANITY_API_VERSION",
    "SANITY_DATASET",
    "SANITY_PROJECT_ID",
    "SANITY_USE_CDN",
    "SECRET_KEY",
    "SESSION_MAX_AGE",
    "UNKNOWN_PROVIDER_POLICY",
    "UPLOAD_DIR",
    "configure_logging",
    "engine",
    "isoformat",
    "utcnow",
]
