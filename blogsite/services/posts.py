"""Helpers for post domain objects."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..core.time import isoformat
from ..models import Post

CATEGORIES: List[Dict[str, str]] = [
    {"label": "Tech", "value": "tech"},
    {"label": "Health", "value": "health"},
    {"label": "Food", "value": "food"},
    {"label": "Education", "value": "education"},
    {"label": "Places", "value": "places"},
]
CATEGORY_VALUES = {category["value"] for category in CATEGORIES}

SORT_OPTIONS = ("latest", "popular", "oldest")

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Lowercase ``title`` and collapse everything else into single dashes."""

    return _SLUG_SEPARATORS.sub("-", (title or "").lower()).strip("-")


def default_content() -> List[Dict[str, Any]]:
    """Placeholder body for posts created without content."""

    return [
        {
            "_type": "block",
            "children": [
                {
                    "_type": "span",
                    "text": "Start writing your blog content here...",
                }
            ],
            "style": "normal",
        }
    ]


def _published_key(blog: Dict[str, Any]) -> float:
    raw = blog.get("publishedAt")
    if not raw:
        return 0.0
    published = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published.timestamp()


def filter_and_sort(
    blogs: Iterable[Dict[str, Any]], category: str = "all", sort: str = "latest"
) -> List[Dict[str, Any]]:
    """Apply the index page's category filter and sort order to post summaries."""

    selected = list(blogs)
    if category and category != "all":
        selected = [blog for blog in selected if blog.get("category") == category]

    if sort == "latest":
        return sorted(selected, key=_published_key, reverse=True)
    if sort == "oldest":
        return sorted(selected, key=_published_key)
    if sort == "popular":
        return sorted(selected, key=lambda blog: blog.get("views") or 0, reverse=True)
    return selected


def post_content(post: Post) -> List[Dict[str, Any]]:
    return json.loads(post.content_json or "[]")


def _main_image(post: Post) -> Optional[Dict[str, Any]]:
    if not post.main_image_url and not post.main_image_asset_id:
        return None
    return {"asset": {"_id": post.main_image_asset_id, "url": post.main_image_url}}


def post_summary(post: Post) -> Dict[str, Any]:
    """Serialise a post for list views (no body)."""

    return {
        "_id": post.id,
        "title": post.title,
        "slug": {"current": post.slug},
        "excerpt": post.excerpt,
        "publishedAt": isoformat(post.published_at),
        "author": post.author,
        "category": post.category,
        "views": post.views,
        "commentsEnabled": post.comments_enabled,
        "mainImage": _main_image(post),
    }


def post_to_dict(post: Post) -> Dict[str, Any]:
    """Serialise a post with its portable-text body."""

    return {**post_summary(post), "content": post_content(post)}


def new_post(
    *,
    title: str,
    slug: str,
    published_at: datetime,
    content: Optional[List[Dict[str, Any]]] = None,
    excerpt: Optional[str] = None,
    author: Optional[str] = None,
    category: Optional[str] = None,
    main_image: Optional[Dict[str, Any]] = None,
) -> Post:
    """Build an unsaved post from create-form fields."""

    asset = (main_image or {}).get("asset") or {}
    return Post(
        title=title,
        slug=slug,
        content_json=json.dumps(content or default_content()),
        published_at=published_at,
        views=0,
        comments_enabled=True,
        excerpt=excerpt or None,
        author=author or None,
        category=category or None,
        main_image_asset_id=asset.get("_ref") or asset.get("_id"),
        main_image_url=asset.get("url"),
    )


__all__ = [
    "CATEGORIES",
    "CATEGORY_VALUES",
    "SORT_OPTIONS",
    "default_content",
    "filter_and_sort",
    "new_post",
    "post_content",
    "post_summary",
    "post_to_dict",
    "slugify",
]
