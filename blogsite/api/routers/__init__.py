"""Aggregate API routers."""

from fastapi import APIRouter

from .auth import router as auth_router
from .comments import router as comments_router
from .posts import router as posts_router
from .profiles import router as profiles_router
from .system import router as system_router
from .uploads import router as uploads_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    posts_router,
    comments_router,
    uploads_router,
    profiles_router,
    auth_router,
)

__all__ = ["ALL_ROUTERS"]
