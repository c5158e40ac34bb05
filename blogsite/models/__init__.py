"""Database model exports."""

from .asset import IMAGE_EXTENSIONS, ImageAsset
from .author import Author
from .comment import Comment
from .post import Post

__all__ = [
    "IMAGE_EXTENSIONS",
    "Author",
    "Comment",
    "ImageAsset",
    "Post",
]
