"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core import CONTENT_STORE
from ...services.posts import CATEGORIES, SORT_OPTIONS

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Kubernetes-style readiness endpoint."""

    return JSONResponse({"ok": True})


@router.get("/config")
def get_config() -> Dict[str, Any]:
    """Expose frontend configuration values."""

    return {
        "categories": [{"label": "All", "value": "all"}, *CATEGORIES],
        "sortOptions": list(SORT_OPTIONS),
        "contentStore": CONTENT_STORE,
    }


__all__ = ["router"]
