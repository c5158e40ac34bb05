"""Service layer helpers."""

from .authors import author_to_dict
from .comments import CommentValidationError, comment_to_dict, validate_comment
from .identity import (
    AuthSession,
    IdentityProvider,
    OAuthIdentity,
    SessionUser,
    enrich_session,
    reconcile_sign_in,
)
from .posts import filter_and_sort, post_summary, post_to_dict, slugify
from .revalidate import RevalidatingCache

__all__ = [
    "AuthSession",
    "CommentValidationError",
    "IdentityProvider",
    "OAuthIdentity",
    "RevalidatingCache",
    "SessionUser",
    "author_to_dict",
    "comment_to_dict",
    "enrich_session",
    "filter_and_sort",
    "post_summary",
    "post_to_dict",
    "reconcile_sign_in",
    "slugify",
    "validate_comment",
]
