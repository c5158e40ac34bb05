"""Content store backed by a relational database through SQLModel."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, func, select

from ..models import IMAGE_EXTENSIONS, Author, Comment, ImageAsset, Post
from .base import ContentStore
from .errors import (
    DocumentNotFound,
    DuplicateDocument,
    StoreError,
    StoreRequestError,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


class SqlContentStore(ContentStore):
    """Store documents as rows; one instance per database session."""

    name = "sql"

    def __init__(self, session: Session, upload_dir: Path) -> None:
        self.session = session
        self.upload_dir = Path(upload_dir)

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except StoreError:
            raise
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateDocument(f"{action}: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable(f"{action}: {exc}") from exc

    def _save(self, instance: ModelT) -> ModelT:
        self.session.add(instance)
        self.session.commit()
        self.session.refresh(instance)
        return instance

    def _patch(self, model: Type[ModelT], doc_id: str, fields: dict) -> ModelT:
        instance = self.session.get(model, doc_id)
        if instance is None:
            raise DocumentNotFound(doc_id)
        for key in fields:
            if key == "id" or key not in model.model_fields:
                raise StoreRequestError(f"Cannot patch field {key!r} on {model.__name__}")
        for key, value in fields.items():
            setattr(instance, key, value)
        return self._save(instance)

    # Authors ---------------------------------------------------------------
    def fetch_author_by_email(self, email: str) -> Optional[Author]:
        with self._guard("fetch author"):
            return self.session.exec(
                select(Author).where(Author.email == email).order_by(Author.joined_at)
            ).first()

    def fetch_author(self, author_id: str) -> Optional[Author]:
        with self._guard("fetch author"):
            return self.session.get(Author, author_id)

    def create_author_if_absent(self, author: Author) -> Author:
        with self._guard("create author"):
            try:
                return self._save(author)
            except IntegrityError:
                # Another sign-in inserted this email first; keep its row.
                self.session.rollback()
                existing = self.fetch_author_by_email(author.email)
                if existing is None:
                    raise
                logger.info("author_create_lost_race email=%s id=%s", author.email, existing.id)
                return existing

    def patch_author(self, author_id: str, **fields: Any) -> Author:
        with self._guard("patch author"):
            return self._patch(Author, author_id, fields)

    def count_posts_by_author(self, name: str) -> int:
        with self._guard("count posts"):
            return self.session.exec(
                select(func.count(Post.id)).where(Post.author == name)
            ).one()

    # Posts -----------------------------------------------------------------
    def list_posts(self) -> List[Post]:
        with self._guard("list posts"):
            return list(
                self.session.exec(select(Post).order_by(Post.published_at.desc())).all()
            )

    def list_post_slugs(self) -> List[str]:
        with self._guard("list slugs"):
            return list(self.session.exec(select(Post.slug)).all())

    def fetch_post_by_slug(self, slug: str) -> Optional[Post]:
        with self._guard("fetch post"):
            return self.session.exec(select(Post).where(Post.slug == slug)).first()

    def fetch_post(self, post_id: str) -> Optional[Post]:
        with self._guard("fetch post"):
            return self.session.get(Post, post_id)

    def list_posts_by_author(self, name: str) -> List[Post]:
        with self._guard("list posts"):
            return list(
                self.session.exec(
                    select(Post)
                    .where(Post.author == name)
                    .order_by(Post.published_at.desc())
                ).all()
            )

    def create_post(self, post: Post) -> Post:
        with self._guard("create post"):
            return self._save(post)

    def patch_post(self, post_id: str, **fields: Any) -> Post:
        with self._guard("patch post"):
            return self._patch(Post, post_id, fields)

    def delete_post(self, post_id: str) -> None:
        with self._guard("delete post"):
            post = self.session.get(Post, post_id)
            if post is None:
                raise DocumentNotFound(post_id)
            self.session.delete(post)
            self.session.commit()

    # Comments --------------------------------------------------------------
    def list_comments(self, post_id: str) -> List[Comment]:
        with self._guard("list comments"):
            return list(
                self.session.exec(
                    select(Comment)
                    .where(Comment.post_id == post_id)
                    .order_by(Comment.created_at.desc())
                ).all()
            )

    def create_comment(self, comment: Comment) -> Comment:
        with self._guard("create comment"):
            return self._save(comment)

    # Assets ----------------------------------------------------------------
    def upload_image(self, data: bytes, filename: str, content_type: str) -> ImageAsset:
        ext = IMAGE_EXTENSIONS.get(content_type)
        if ext is None:
            raise StoreRequestError(f"Unsupported image type: {content_type}")

        asset = ImageAsset(filename=filename, content_type=content_type, url="")
        stored_name = f"{asset.id}{ext}"
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            (self.upload_dir / stored_name).write_bytes(data)
        except OSError as exc:
            raise StoreUnavailable(f"write upload: {exc}") from exc

        asset.url = f"/uploads/{stored_name}"
        with self._guard("record upload"):
            return self._save(asset)


__all__ = ["SqlContentStore"]
