"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Iterator, Optional

from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError
from sqlmodel import Session

from ..core import (
    CONTENT_STORE,
    PAGE_CACHE_MAX_ENTRIES,
    REVALIDATE_SECONDS,
    SANITY_API_TOKEN,
    SANITY_API_VERSION,
    SANITY_DATASET,
    SANITY_PROJECT_ID,
    SANITY_USE_CDN,
    SESSION_MAX_AGE,
    UPLOAD_DIR,
    engine,
    isoformat,
    utcnow,
)
from ..services.identity import AuthSession, SessionUser, enrich_session
from ..services.revalidate import RevalidatingCache
from ..store import ContentStore, SanityClient, SanityContentStore, SqlContentStore

logger = logging.getLogger(__name__)

SESSION_KEY = "auth"

page_cache = RevalidatingCache(REVALIDATE_SECONDS, max_entries=PAGE_CACHE_MAX_ENTRIES)


@lru_cache(maxsize=1)
def sanity_store() -> SanityContentStore:
    client = SanityClient(
        SANITY_PROJECT_ID,
        dataset=SANITY_DATASET,
        api_version=SANITY_API_VERSION,
        token=SANITY_API_TOKEN,
        use_cdn=SANITY_USE_CDN,
    )
    return SanityContentStore(client)


def get_store() -> Iterator[ContentStore]:
    """Yield the configured content store for one request."""

    if CONTENT_STORE == "sanity":
        yield sanity_store()
        return
    with Session(engine) as db:
        yield SqlContentStore(db, UPLOAD_DIR)


def get_page_cache() -> RevalidatingCache:
    return page_cache


def start_session(request: Request, user: SessionUser) -> None:
    """Persist identity claims in the signed session cookie."""

    expires = utcnow() + timedelta(seconds=SESSION_MAX_AGE)
    request.session[SESSION_KEY] = {
        "user": user.model_dump(mode="json", by_alias=True, exclude_none=True),
        "expires": isoformat(expires),
    }


def read_session_claims(request: Request) -> Optional[AuthSession]:
    """Rebuild the un-enriched session from the cookie, or None."""

    raw = request.session.get(SESSION_KEY)
    if not raw:
        return None
    try:
        session = AuthSession(user=SessionUser(**raw["user"]), expires=raw.get("expires"))
    except (KeyError, TypeError, ValidationError):
        logger.warning("session_cookie_invalid")
        request.session.pop(SESSION_KEY, None)
        return None

    if session.expires is not None and session.expires < utcnow():
        request.session.pop(SESSION_KEY, None)
        return None
    return session


def get_current_session(
    request: Request, store: ContentStore = Depends(get_store)
) -> Optional[AuthSession]:
    """Enriched session for the signed-in user, recomputed on every request."""

    claims = read_session_claims(request)
    if claims is None:
        return None
    return enrich_session(claims, store)


def require_session(
    session: Optional[AuthSession] = Depends(get_current_session),
) -> AuthSession:
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session


__all__ = [
    "SESSION_KEY",
    "get_current_session",
    "get_page_cache",
    "get_store",
    "page_cache",
    "read_session_claims",
    "require_session",
    "sanity_store",
    "start_session",
]
