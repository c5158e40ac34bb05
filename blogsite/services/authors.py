"""Helpers for author domain objects."""

from __future__ import annotations

from typing import Any, Dict

from ..core.time import isoformat
from ..models import Author


def author_to_dict(author: Author) -> Dict[str, Any]:
    """Serialise an author for the public profile page."""

    return {
        "_id": author.id,
        "name": author.name,
        "email": author.email,
        "image": {"asset": {"url": author.image}} if author.image else None,
        "trusted": author.trusted,
        "joinedAt": isoformat(author.joined_at),
    }


__all__ = ["author_to_dict"]
