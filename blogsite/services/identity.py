"""Keep author records in step with OAuth identities and sessions.

Two hooks run around authentication:

* :func:`reconcile_sign_in` runs once per completed OAuth handshake. It makes
  sure exactly one :class:`~blogsite.models.Author` exists for the identity's
  email, creating it on first sign-in and refreshing the avatar afterwards.
  Any failure while talking to the store denies the sign-in.
* :func:`enrich_session` runs on every session read. It copies durable author
  attributes (id, trust flag, join date, post count) onto the session user.
  Any failure is logged and the session is returned as it came in.

Both take the store explicitly so they can be exercised without a web request.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..core.time import isoformat, utcnow
from ..models import Author
from ..store import ContentStore

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR_NAME = "Unknown"


class IdentityProvider(str, enum.Enum):
    """OAuth providers whose identities are reconciled into authors."""

    GITHUB = "github"


def is_supported(provider: Optional[str]) -> bool:
    return provider in {member.value for member in IdentityProvider}


@dataclass(frozen=True)
class OAuthIdentity:
    """Profile handed back by a completed OAuth handshake."""

    provider: str
    provider_account_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class SessionUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    id: Optional[str] = None
    trusted: Optional[bool] = None
    joined_at: Optional[datetime] = Field(default=None, alias="joinedAt")
    post_count: Optional[int] = Field(default=None, alias="postCount")

    @field_serializer("joined_at", when_used="json")
    def serialize_joined_at(self, value: Optional[datetime]) -> Optional[str]:
        # Naive values come back from SQLite and are UTC.
        return isoformat(value)


class AuthSession(BaseModel):
    """Per-request view of a signed-in user."""

    user: SessionUser
    expires: Optional[datetime] = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def reconcile_sign_in(
    identity: Optional[OAuthIdentity],
    store: ContentStore,
    *,
    now: Optional[datetime] = None,
    unknown_provider_policy: str = "allow",
) -> bool:
    """Create or refresh the author for ``identity``; return whether to admit it."""

    if identity is None or not is_supported(identity.provider):
        allowed = unknown_provider_policy != "deny"
        logger.warning(
            "sign_in_unreconciled provider=%s allowed=%s",
            identity.provider if identity else None,
            allowed,
        )
        return allowed

    email = identity.email or ""
    try:
        author = store.fetch_author_by_email(email)
        if author is None:
            author = store.create_author_if_absent(
                Author(
                    name=identity.name or UNKNOWN_AUTHOR_NAME,
                    email=email,
                    image=identity.image or "",
                    github_id=identity.provider_account_id,
                    joined_at=now or utcnow(),
                    trusted=False,
                )
            )
            logger.info("author_reconciled email=%s id=%s", email, author.id)

        # A create that lost a race hands back the other request's record.
        if identity.image and author.image != identity.image:
            store.patch_author(author.id, image=identity.image)
            logger.info("author_avatar_updated id=%s", author.id)
    except Exception:
        logger.exception("sign_in_reconciliation_failed email=%s", email)
        return False

    return True


def enrich_session(session: AuthSession, store: ContentStore) -> AuthSession:
    """Return ``session`` with author attributes filled in where possible."""

    email = session.user.email
    if not email:
        return session

    try:
        author = store.fetch_author_by_email(email)
        if author is None:
            return session
        post_count = store.count_posts_by_author(author.name)
    except Exception:
        logger.exception("session_enrichment_failed email=%s", email)
        return session

    enriched = session.model_copy(deep=True)
    enriched.user.id = author.id
    enriched.user.trusted = author.trusted
    enriched.user.joined_at = author.joined_at
    enriched.user.post_count = post_count
    return enriched


__all__ = [
    "AuthSession",
    "IdentityProvider",
    "OAuthIdentity",
    "SessionUser",
    "UNKNOWN_AUTHOR_NAME",
    "enrich_session",
    "is_supported",
    "reconcile_sign_in",
]
