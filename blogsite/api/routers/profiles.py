"""Author profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ...services.authors import author_to_dict
from ...services.posts import post_summary
from ...services.revalidate import RevalidatingCache
from ...store import ContentStore
from ..dependencies import get_page_cache, get_store

router = APIRouter(tags=["profiles"])


@router.get("/profile/{author_id}")
def get_profile(
    author_id: str,
    store: ContentStore = Depends(get_store),
    cache: RevalidatingCache = Depends(get_page_cache),
):
    """Profile page props: the author and the posts published under their name."""

    def load():
        author = store.fetch_author(author_id)
        if author is None:
            return None
        return {
            "author": author_to_dict(author),
            "blogs": [post_summary(post) for post in store.list_posts_by_author(author.name)],
        }

    profile = cache.get_or_load(f"profile:{author_id}", load)
    if profile is None:
        raise HTTPException(404, "Author not found")
    return profile


__all__ = ["router"]
