"""Abstract content store used by services and routes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..models import Author, Comment, ImageAsset, Post


class ContentStore(ABC):
    """Document store holding authors, posts, comments and images.

    Implementations raise :class:`~blogsite.store.errors.StoreError` subclasses
    for every failure so callers never see backend-specific exceptions.
    """

    name: str = "abstract"

    # Authors ---------------------------------------------------------------
    @abstractmethod
    def fetch_author_by_email(self, email: str) -> Optional[Author]:
        """Return the first author whose email matches exactly."""

    @abstractmethod
    def fetch_author(self, author_id: str) -> Optional[Author]:
        ...

    @abstractmethod
    def create_author_if_absent(self, author: Author) -> Author:
        """Insert ``author`` unless one with the same email exists.

        Returns whichever record the store holds for that email afterwards,
        so two concurrent callers both get the single surviving author.
        """

    @abstractmethod
    def patch_author(self, author_id: str, **fields: Any) -> Author:
        ...

    @abstractmethod
    def count_posts_by_author(self, name: str) -> int:
        """Count posts whose author-name field equals ``name``."""

    # Posts -----------------------------------------------------------------
    @abstractmethod
    def list_posts(self) -> List[Post]:
        """All posts, newest first."""

    @abstractmethod
    def list_post_slugs(self) -> List[str]:
        ...

    @abstractmethod
    def fetch_post_by_slug(self, slug: str) -> Optional[Post]:
        ...

    @abstractmethod
    def fetch_post(self, post_id: str) -> Optional[Post]:
        ...

    @abstractmethod
    def list_posts_by_author(self, name: str) -> List[Post]:
        ...

    @abstractmethod
    def create_post(self, post: Post) -> Post:
        ...

    @abstractmethod
    def patch_post(self, post_id: str, **fields: Any) -> Post:
        ...

    @abstractmethod
    def delete_post(self, post_id: str) -> None:
        ...

    # Comments --------------------------------------------------------------
    @abstractmethod
    def list_comments(self, post_id: str) -> List[Comment]:
        """Comments on a post, newest first."""

    @abstractmethod
    def create_comment(self, comment: Comment) -> Comment:
        ...

    # Assets ----------------------------------------------------------------
    @abstractmethod
    def upload_image(self, data: bytes, filename: str, content_type: str) -> ImageAsset:
        ...

    def image_url(self, asset: ImageAsset, width: Optional[int] = None) -> str:
        """Public URL for ``asset``; backends that resize honour ``width``."""

        return asset.url


__all__ = ["ContentStore"]
