"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# GitHub OAuth configuration -------------------------------------------------
GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")
OAUTH_REDIRECT_URL = os.getenv(
    "OAUTH_REDIRECT_URL", "http://127.0.0.1:3000/auth/github/callback"
)

# "allow" lets identities from providers we do not reconcile sign in anyway.
UNKNOWN_PROVIDER_POLICY = os.getenv("UNKNOWN_PROVIDER_POLICY", "allow").strip().lower()
if UNKNOWN_PROVIDER_POLICY not in {"allow", "deny"}:
    raise RuntimeError("UNKNOWN_PROVIDER_POLICY must be 'allow' or 'deny'")


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")

# FRONTEND_ORIGIN can contain a comma-separated list for multi-domain deploys.
_frontend_origins = _split_csv(os.getenv("FRONTEND_ORIGIN", "http://localhost:3000"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)

FRONTEND_ORIGINS = _frontend_origins
FRONTEND_ORIGIN = FRONTEND_ORIGINS[0] if FRONTEND_ORIGINS else ""

COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None
COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")
SESSION_MAX_AGE = _env_int("SESSION_MAX_AGE", 30 * 24 * 60 * 60)


# Content store --------------------------------------------------------------
CONTENT_STORE = os.getenv("CONTENT_STORE", "sql").strip().lower()
if CONTENT_STORE not in {"sql", "sanity"}:
    raise RuntimeError("CONTENT_STORE must be 'sql' or 'sanity'")

DATABASE_URL = os.getenv("DATABASE_URL", "")
DB_RESET = _env_bool("DB_RESET", False)

SANITY_PROJECT_ID = os.getenv("SANITY_PROJECT_ID", "")
SANITY_DATASET = os.getenv("SANITY_DATASET", "production")
SANITY_API_VERSION = os.getenv("SANITY_API_VERSION", "2023-01-01")
SANITY_API_TOKEN = os.getenv("SANITY_API_TOKEN") or None
SANITY_USE_CDN = _env_bool("SANITY_USE_CDN", True)

if CONTENT_STORE == "sanity" and not SANITY_PROJECT_ID:
    raise RuntimeError("SANITY_PROJECT_ID is required when CONTENT_STORE=sanity")


# Runtime behaviour ----------------------------------------------------------
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", "uploads"))
REVALIDATE_SECONDS = _env_int("REVALIDATE_SECONDS", 60)
PAGE_CACHE_MAX_ENTRIES = _env_int("PAGE_CACHE_MAX_ENTRIES", 512)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "CONTENT_STORE",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
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
]
