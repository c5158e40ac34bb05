"""Comment listing and submission endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ...core import utcnow
from ...models import Comment
from ...services.comments import CommentValidationError, comment_to_dict, validate_comment
from ...store import ContentStore, StoreError
from ..dependencies import get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


@router.get("/api/comments/{blog_id}")
def list_comments(blog_id: str, store: ContentStore = Depends(get_store)):
    """Comments for a post, newest first."""

    try:
        comments = store.list_comments(blog_id)
    except StoreError as exc:
        logger.exception("comments_fetch_failed blog_id=%s", blog_id)
        raise HTTPException(500, f"Failed to fetch comments: {exc}") from exc
    return {"comments": [comment_to_dict(comment) for comment in comments]}


@router.post("/api/comments")
def create_comment(body: Dict[str, Any], store: ContentStore = Depends(get_store)):
    """Submit a rated comment on a post that accepts them."""

    try:
        fields = validate_comment(body)
    except CommentValidationError as exc:
        raise HTTPException(400, str(exc)) from exc

    try:
        post = store.fetch_post(fields["post_id"])
        if post is None:
            raise HTTPException(404, "Blog not found")
        if not post.comments_enabled:
            raise HTTPException(403, "Comments are disabled for this blog")
        created = store.create_comment(Comment(**fields, created_at=utcnow()))
    except StoreError as exc:
        logger.exception("comment_create_failed blog_id=%s", fields["post_id"])
        raise HTTPException(500, f"Failed to create comment: {exc}") from exc

    return {"success": True, "comment": comment_to_dict(created)}


__all__ = ["router"]
