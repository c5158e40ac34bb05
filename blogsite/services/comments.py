"""Helpers for comment domain objects."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..core.time import isoformat
from ..models import Comment

_REQUIRED_FIELDS = ("blogId", "name", "email", "comment")


class CommentValidationError(ValueError):
    """Comment payload is incomplete or out of range."""


def validate_comment(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Return normalised comment fields or raise CommentValidationError."""

    if any(not payload.get(field) for field in _REQUIRED_FIELDS):
        raise CommentValidationError("Missing required fields")

    rating = payload.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise CommentValidationError("Rating must be between 1 and 5")
    if rating != int(rating) or not 1 <= rating <= 5:
        raise CommentValidationError("Rating must be between 1 and 5")

    return {
        "post_id": str(payload["blogId"]),
        "name": str(payload["name"]).strip(),
        "email": str(payload["email"]).strip(),
        "comment": str(payload["comment"]),
        "rating": int(rating),
    }


def comment_to_dict(comment: Comment) -> Dict[str, Any]:
    return {
        "_id": comment.id,
        "name": comment.name,
        "email": comment.email,
        "comment": comment.comment,
        "rating": comment.rating,
        "createdAt": isoformat(comment.created_at),
    }


__all__ = ["CommentValidationError", "comment_to_dict", "validate_comment"]
