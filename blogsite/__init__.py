"""Blog backend: posts, comments and GitHub sign-in over a content store."""

__version__ = "0.3.0"
