"""Content store backed by a Sanity dataset."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.time import isoformat
from ..models import Author, Comment, ImageAsset, Post
from .base import ContentStore
from .errors import DuplicateDocument, StoreRequestError
from .sanity_client import SanityClient

_POST_FIELDS = """
    _id,
    title,
    slug,
    excerpt,
    content,
    publishedAt,
    author,
    category,
    views,
    commentsEnabled,
    mainImage {
      asset-> {
        _id,
        url
      }
    }
"""

_AUTHOR_FIELDS = """
    _id,
    name,
    email,
    image,
    githubId,
    trusted,
    joinedAt
"""

AUTHOR_BY_EMAIL_QUERY = f'*[_type == "author" && email == $email][0]{{{_AUTHOR_FIELDS}}}'
AUTHOR_BY_ID_QUERY = f'*[_type == "author" && _id == $id][0]{{{_AUTHOR_FIELDS}}}'
POST_COUNT_QUERY = 'count(*[_type == "blog" && author == $name])'
ALL_POSTS_QUERY = f'*[_type == "blog"] | order(publishedAt desc) {{{_POST_FIELDS}}}'
ALL_SLUGS_QUERY = '*[_type == "blog" && defined(slug.current)].slug.current'
POST_BY_SLUG_QUERY = f'*[_type == "blog" && slug.current == $slug][0] {{{_POST_FIELDS}}}'
POST_BY_ID_QUERY = f'*[_type == "blog" && _id == $id][0] {{{_POST_FIELDS}}}'
POSTS_BY_AUTHOR_QUERY = (
    f'*[_type == "blog" && author == $name] | order(publishedAt desc) {{{_POST_FIELDS}}}'
)
COMMENTS_QUERY = """
  *[_type == "comment" && blog._ref == $blogId] | order(createdAt desc) {
    _id,
    "postId": blog._ref,
    name,
    email,
    comment,
    rating,
    createdAt
  }
"""

_AUTHOR_FIELD_NAMES = {
    "name": "name",
    "email": "email",
    "image": "image",
    "github_id": "githubId",
    "trusted": "trusted",
    "joined_at": "joinedAt",
}

_POST_FIELD_NAMES = {
    "title": "title",
    "excerpt": "excerpt",
    "author": "author",
    "category": "category",
    "views": "views",
    "comments_enabled": "commentsEnabled",
}


def author_document_id(email: str) -> str:
    """Deterministic document id so concurrent creates collapse into one."""

    digest = hashlib.sha256(email.encode("utf-8")).hexdigest()[:32]
    return f"author-{digest}"


def post_document_id(slug: str) -> str:
    """Deterministic document id so a slug can only be created once."""

    digest = hashlib.sha256(slug.encode("utf-8")).hexdigest()[:32]
    return f"blog-{digest}"


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    if isinstance(raw, datetime):
        return raw
    parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _image_url(raw: Any) -> str:
    # Authors created by sign-in hold a URL string; studio edits hold an image object.
    if isinstance(raw, dict):
        asset = raw.get("asset") or {}
        return asset.get("url") or ""
    return raw or ""


def _author_from_doc(doc: Dict[str, Any]) -> Author:
    return Author(
        id=doc["_id"],
        name=doc.get("name") or "",
        email=doc.get("email") or "",
        image=_image_url(doc.get("image")),
        github_id=doc.get("githubId"),
        trusted=bool(doc.get("trusted")),
        joined_at=_parse_datetime(doc.get("joinedAt")) or datetime.now(timezone.utc),
    )


def _post_from_doc(doc: Dict[str, Any]) -> Post:
    slug = doc.get("slug") or {}
    asset = (doc.get("mainImage") or {}).get("asset") or {}
    return Post(
        id=doc["_id"],
        title=doc.get("title") or "",
        slug=slug.get("current", "") if isinstance(slug, dict) else str(slug),
        excerpt=doc.get("excerpt"),
        content_json=json.dumps(doc.get("content") or []),
        published_at=_parse_datetime(doc.get("publishedAt")) or datetime.now(timezone.utc),
        author=doc.get("author"),
        category=doc.get("category"),
        views=doc.get("views") or 0,
        comments_enabled=doc.get("commentsEnabled") is not False,
        main_image_asset_id=asset.get("_id") or asset.get("_ref"),
        main_image_url=asset.get("url"),
    )


def _comment_from_doc(doc: Dict[str, Any]) -> Comment:
    post_id = doc.get("postId") or (doc.get("blog") or {}).get("_ref") or ""
    return Comment(
        id=doc["_id"],
        post_id=post_id,
        name=doc.get("name") or "",
        email=doc.get("email") or "",
        comment=doc.get("comment") or "",
        rating=int(doc.get("rating") or 0),
        created_at=_parse_datetime(doc.get("createdAt")) or datetime.now(timezone.utc),
    )


def _rename(fields: Dict[str, Any], names: Dict[str, str], kind: str) -> Dict[str, Any]:
    renamed: Dict[str, Any] = {}
    for key, value in fields.items():
        if key not in names:
            raise StoreRequestError(f"Cannot patch field {key!r} on {kind}")
        if isinstance(value, datetime):
            value = isoformat(value)
        renamed[names[key]] = value
    return renamed


class SanityContentStore(ContentStore):
    """Map store operations onto GROQ queries and Sanity mutations."""

    name = "sanity"

    def __init__(self, client: SanityClient) -> None:
        self.client = client

    # Authors ---------------------------------------------------------------
    def fetch_author_by_email(self, email: str) -> Optional[Author]:
        doc = self.client.fetch(AUTHOR_BY_EMAIL_QUERY, {"email": email})
        return _author_from_doc(doc) if doc else None

    def fetch_author(self, author_id: str) -> Optional[Author]:
        doc = self.client.fetch(AUTHOR_BY_ID_QUERY, {"id": author_id})
        return _author_from_doc(doc) if doc else None

    def create_author_if_absent(self, author: Author) -> Author:
        document = {
            "_id": author_document_id(author.email),
            "_type": "author",
            "name": author.name,
            "email": author.email,
            "image": author.image,
            "githubId": author.github_id,
            "joinedAt": isoformat(author.joined_at),
            "trusted": author.trusted,
        }
        return _author_from_doc(self.client.create_if_not_exists(document))

    def patch_author(self, author_id: str, **fields: Any) -> Author:
        changes = _rename(fields, _AUTHOR_FIELD_NAMES, "author")
        return _author_from_doc(self.client.patch(author_id, changes))

    def count_posts_by_author(self, name: str) -> int:
        return int(self.client.fetch(POST_COUNT_QUERY, {"name": name}) or 0)

    # Posts -----------------------------------------------------------------
    def list_posts(self) -> List[Post]:
        return [_post_from_doc(doc) for doc in self.client.fetch(ALL_POSTS_QUERY) or []]

    def list_post_slugs(self) -> List[str]:
        return list(self.client.fetch(ALL_SLUGS_QUERY) or [])

    def fetch_post_by_slug(self, slug: str) -> Optional[Post]:
        doc = self.client.fetch(POST_BY_SLUG_QUERY, {"slug": slug})
        return _post_from_doc(doc) if doc else None

    def fetch_post(self, post_id: str) -> Optional[Post]:
        doc = self.client.fetch(POST_BY_ID_QUERY, {"id": post_id}, use_cdn=False)
        return _post_from_doc(doc) if doc else None

    def list_posts_by_author(self, name: str) -> List[Post]:
        docs = self.client.fetch(POSTS_BY_AUTHOR_QUERY, {"name": name}) or []
        return [_post_from_doc(doc) for doc in docs]

    def create_post(self, post: Post) -> Post:
        # Posts made in the studio have random ids, so check the slug as well.
        if self.client.fetch(POST_BY_SLUG_QUERY, {"slug": post.slug}, use_cdn=False):
            raise DuplicateDocument(f"Slug already in use: {post.slug}")

        document: Dict[str, Any] = {
            "_id": post_document_id(post.slug),
            "_type": "blog",
            "title": post.title,
            "slug": {"_type": "slug", "current": post.slug},
            "content": json.loads(post.content_json or "[]"),
            "publishedAt": isoformat(post.published_at),
            "views": post.views,
            "commentsEnabled": post.comments_enabled,
        }
        if post.excerpt:
            document["excerpt"] = post.excerpt
        if post.author:
            document["author"] = post.author
        if post.category:
            document["category"] = post.category
        if post.main_image_asset_id:
            document["mainImage"] = {
                "_type": "image",
                "asset": {"_type": "reference", "_ref": post.main_image_asset_id},
            }
        created = self.client.create(document)
        return self.fetch_post(created["_id"]) or _post_from_doc(created)

    def patch_post(self, post_id: str, **fields: Any) -> Post:
        changes = _rename(fields, _POST_FIELD_NAMES, "post")
        patched = self.client.patch(post_id, changes)
        return self.fetch_post(post_id) or _post_from_doc(patched)

    def delete_post(self, post_id: str) -> None:
        self.client.delete(post_id)

    # Comments --------------------------------------------------------------
    def list_comments(self, post_id: str) -> List[Comment]:
        docs = self.client.fetch(COMMENTS_QUERY, {"blogId": post_id}, use_cdn=False) or []
        return [_comment_from_doc(doc) for doc in docs]

    def create_comment(self, comment: Comment) -> Comment:
        created = self.client.create(
            {
                "_type": "comment",
                "blog": {"_type": "reference", "_ref": comment.post_id},
                "name": comment.name,
                "email": comment.email,
                "comment": comment.comment,
                "rating": comment.rating,
                "createdAt": isoformat(comment.created_at),
            }
        )
        return _comment_from_doc(created)

    # Assets ----------------------------------------------------------------
    def upload_image(self, data: bytes, filename: str, content_type: str) -> ImageAsset:
        doc = self.client.upload_image(data, filename, content_type)
        return ImageAsset(
            id=doc["_id"],
            filename=doc.get("originalFilename") or filename,
            content_type=doc.get("mimeType") or content_type,
            url=doc["url"],
        )

    def image_url(self, asset: ImageAsset, width: Optional[int] = None) -> str:
        if width:
            return f"{asset.url}?w={width}"
        return asset.url


__all__ = ["SanityContentStore", "author_document_id", "post_document_id"]
