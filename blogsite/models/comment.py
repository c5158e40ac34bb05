"""Database model for reader comments."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow
from .author import new_id


class Comment(SQLModel, table=True):
    """Rated comment attached to a post."""

    id: str = ORMField(default_factory=new_id, primary_key=True)
    post_id: str = ORMField(index=True)
    name: str
    email: str
    comment: str
    rating: int
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Comment"]
