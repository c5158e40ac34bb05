"""Database model for blog posts."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow
from .author import new_id


class Post(SQLModel, table=True):
    """Blog post. ``author`` holds the author's display name, not an id."""

    id: str = ORMField(default_factory=new_id, primary_key=True)
    title: str
    slug: str = ORMField(index=True, unique=True)
    excerpt: Optional[str] = None
    content_json: str = "[]"
    published_at: datetime = ORMField(default_factory=utcnow)
    author: Optional[str] = ORMField(default=None, index=True)
    category: Optional[str] = None
    views: int = 0
    comments_enabled: bool = True
    main_image_asset_id: Optional[str] = None
    main_image_url: Optional[str] = None


__all__ = ["Post"]
