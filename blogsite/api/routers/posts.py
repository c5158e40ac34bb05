"""Blog post listing and management endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ...core import utcnow
from ...services.identity import AuthSession
from ...services.posts import (
    CATEGORY_VALUES,
    filter_and_sort,
    new_post,
    post_summary,
    post_to_dict,
    slugify,
)
from ...services.revalidate import RevalidatingCache
from ...store import ContentStore, DocumentNotFound, DuplicateDocument, StoreError
from ..dependencies import get_page_cache, get_store, require_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["posts"])


@router.get("/blogs")
def list_blogs(
    category: str = "all",
    sort: str = "latest",
    store: ContentStore = Depends(get_store),
    cache: RevalidatingCache = Depends(get_page_cache),
):
    """Index page props: every post, filtered and sorted."""

    blogs = cache.get_or_load(
        "index", lambda: [post_summary(post) for post in store.list_posts()]
    )
    return {"blogs": filter_and_sort(blogs, category=category, sort=sort)}


@router.get("/blogs/slugs")
def list_blog_slugs(store: ContentStore = Depends(get_store)):
    return {"slugs": store.list_post_slugs()}


@router.get("/blogs/{slug}")
def get_blog(
    slug: str,
    store: ContentStore = Depends(get_store),
    cache: RevalidatingCache = Depends(get_page_cache),
):
    """Detail page props for one post."""

    def load():
        post = store.fetch_post_by_slug(slug)
        return post_to_dict(post) if post else None

    blog = cache.get_or_load(f"blog:{slug}", load)
    if blog is None:
        raise HTTPException(404, "Blog not found")
    return {"blog": blog}


@router.post("/api/blog/create")
def create_blog(
    body: Dict[str, Any],
    session: AuthSession = Depends(require_session),
    store: ContentStore = Depends(get_store),
    cache: RevalidatingCache = Depends(get_page_cache),
):
    """Create a post; the author defaults to the signed-in user's name."""

    title = (body.get("title") or "").strip()
    slug = slugify(body.get("slug") or "") or slugify(title)
    if not title or not slug:
        raise HTTPException(400, "Title and slug are required")

    category = body.get("category")
    if category and category not in CATEGORY_VALUES:
        raise HTTPException(400, f"Unknown category: {category}")

    post = new_post(
        title=title,
        slug=slug,
        published_at=utcnow(),
        content=body.get("content"),
        excerpt=body.get("excerpt"),
        author=body.get("author") or session.user.name,
        category=category,
        main_image=body.get("mainImage"),
    )
    try:
        created = store.create_post(post)
    except DuplicateDocument as exc:
        raise HTTPException(409, "A blog with this slug already exists") from exc
    except StoreError as exc:
        logger.exception("blog_create_failed slug=%s", slug)
        raise HTTPException(500, f"Failed to create blog: {exc}") from exc

    cache.invalidate()
    return {"success": True, "blog": post_to_dict(created)}


@router.put("/api/blog/{post_id}")
def update_blog(
    post_id: str,
    body: Dict[str, Any],
    session: AuthSession = Depends(require_session),
    store: ContentStore = Depends(get_store),
    cache: RevalidatingCache = Depends(get_page_cache),
):
    """Edit title, excerpt, author and the comments switch of a post."""

    title = body.get("title")
    if not title:
        raise HTTPException(400, "Title is required")

    comments_enabled = body.get("commentsEnabled")
    fields: Dict[str, Any] = {
        "title": title,
        "comments_enabled": True if comments_enabled is None else bool(comments_enabled),
    }
    if body.get("excerpt"):
        fields["excerpt"] = body["excerpt"]
    if body.get("author"):
        fields["author"] = body["author"]

    try:
        updated = store.patch_post(post_id, **fields)
    except DocumentNotFound as exc:
        raise HTTPException(404, "Blog not found") from exc
    except StoreError as exc:
        logger.exception("blog_update_failed id=%s", post_id)
        raise HTTPException(500, f"Failed to update blog: {exc}") from exc

    cache.invalidate()
    return {"success": True, "blog": post_to_dict(updated)}


@router.delete("/api/blog/{post_id}")
def delete_blog(
    post_id: str,
    session: AuthSession = Depends(require_session),
    store: ContentStore = Depends(get_store),
    cache: RevalidatingCache = Depends(get_page_cache),
):
    try:
        store.delete_post(post_id)
    except DocumentNotFound as exc:
        raise HTTPException(404, "Blog not found") from exc
    except StoreError as exc:
        logger.exception("blog_delete_failed id=%s", post_id)
        raise HTTPException(500, f"Failed to delete blog: {exc}") from exc

    cache.invalidate()
    return {"success": True}


__all__ = ["router"]
