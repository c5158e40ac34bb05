"""Database model for authors reconciled from OAuth identities."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


def new_id() -> str:
    return uuid.uuid4().hex


class Author(SQLModel, table=True):
    """Durable profile keyed by email, one per signed-in person."""

    id: str = ORMField(default_factory=new_id, primary_key=True)
    name: str
    email: str = ORMField(index=True, unique=True)
    image: str = ""
    github_id: Optional[str] = None
    trusted: bool = False
    joined_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Author", "new_id"]
