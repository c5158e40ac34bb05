"""GitHub OAuth sign-in and session routes."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ...core import (
    FRONTEND_ORIGIN,
    FRONTEND_ORIGINS,
    GITHUB_CLIENT_ID,
    GITHUB_CLIENT_SECRET,
    OAUTH_REDIRECT_URL,
    UNKNOWN_PROVIDER_POLICY,
)
from ...services.identity import (
    AuthSession,
    IdentityProvider,
    OAuthIdentity,
    SessionUser,
    reconcile_sign_in,
)
from ...store import ContentStore
from ..dependencies import SESSION_KEY, get_current_session, get_store, start_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

oauth = OAuth()

# Registered with placeholders when unconfigured so the app can still boot.
oauth.register(
    name=IdentityProvider.GITHUB.value,
    client_id=GITHUB_CLIENT_ID or "dummy",
    client_secret=GITHUB_CLIENT_SECRET or "dummy",
    access_token_url="https://github.com/login/oauth/access_token",
    authorize_url="https://github.com/login/oauth/authorize",
    api_base_url="https://api.github.com/",
    client_kwargs={"scope": "read:user user:email"},
)


def pick_primary_email(emails: List[Dict[str, Any]]) -> Optional[str]:
    """Choose the address GitHub marks primary, else the first listed."""

    for entry in emails:
        if entry.get("primary"):
            return entry.get("email")
    return emails[0].get("email") if emails else None


def identity_from_github(profile: Dict[str, Any], email: Optional[str]) -> OAuthIdentity:
    return OAuthIdentity(
        provider=IdentityProvider.GITHUB.value,
        provider_account_id=str(profile["id"]),
        name=profile.get("name") or profile.get("login"),
        email=email,
        image=profile.get("avatar_url"),
    )


def _signin_error_url(error: str) -> str:
    return f"{FRONTEND_ORIGIN}/auth/signin?error={error}"


def safe_next_url(next_url: Optional[str]) -> str:
    """Return ``next_url`` if it points at a front-end origin, else the default origin."""

    if not next_url or "\\" in next_url:
        return FRONTEND_ORIGIN
    parts = urlsplit(next_url)
    if not parts.scheme and not parts.netloc:
        if next_url.startswith("/") and not next_url.startswith("//"):
            return f"{FRONTEND_ORIGIN}{next_url}"
        return FRONTEND_ORIGIN
    origin = f"{parts.scheme}://{parts.netloc}"
    allowed = {value.rstrip("/") for value in FRONTEND_ORIGINS}
    if parts.username is not None or parts.password is not None or origin not in allowed:
        logger.warning("oauth_next_rejected next=%s", next_url)
        return FRONTEND_ORIGIN
    return next_url


@router.get("/auth/github/start")
async def auth_github_start(request: Request, next: str | None = None):
    if not GITHUB_CLIENT_ID or not GITHUB_CLIENT_SECRET:
        raise HTTPException(
            status_code=500,
            detail="GitHub OAuth not configured. Check GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET.",
        )

    if next:
        request.session["next"] = next
    try:
        return await oauth.github.authorize_redirect(request, OAUTH_REDIRECT_URL)
    except OAuthError as exc:
        raise HTTPException(status_code=500, detail=f"OAuth error: {exc}") from exc


@router.get("/auth/github/callback")
async def auth_github_callback(request: Request, store: ContentStore = Depends(get_store)):
    try:
        token = await oauth.github.authorize_access_token(request)
        profile = (await oauth.github.get("user", token=token)).json()
        email = profile.get("email")
        if not email:
            emails = (await oauth.github.get("user/emails", token=token)).json()
            email = pick_primary_email(emails if isinstance(emails, list) else [])
    except OAuthError as exc:
        logger.warning("oauth_callback_failed error=%s", exc.error)
        return RedirectResponse(_signin_error_url("OAuthCallback"), status_code=302)

    identity = identity_from_github(profile, email)
    if not reconcile_sign_in(
        identity, store, unknown_provider_policy=UNKNOWN_PROVIDER_POLICY
    ):
        request.session.pop(SESSION_KEY, None)
        return RedirectResponse(_signin_error_url("AccessDenied"), status_code=302)

    start_session(
        request,
        SessionUser(name=identity.name, email=identity.email, image=identity.image),
    )

    next_url = safe_next_url(request.session.pop("next", None))
    return RedirectResponse(next_url, status_code=302)


@router.post("/auth/logout")
def auth_logout(request: Request):
    request.session.clear()
    return JSONResponse({"ok": True})


@router.get("/auth/session")
def read_session(session: Optional[AuthSession] = Depends(get_current_session)):
    if session is None:
        return {"user": None}
    return session.to_json()


__all__ = [
    "identity_from_github",
    "oauth",
    "pick_primary_email",
    "router",
    "safe_next_url",
]
