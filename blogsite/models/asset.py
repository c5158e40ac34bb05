"""Database model for uploaded images."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow
from .author import new_id

IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class ImageAsset(SQLModel, table=True):
    __tablename__ = "image_asset"

    id: str = ORMField(default_factory=new_id, primary_key=True)
    filename: str
    content_type: str
    url: str
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["IMAGE_EXTENSIONS", "ImageAsset"]
