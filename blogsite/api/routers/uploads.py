"""Image upload endpoints."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ...core import UPLOAD_DIR
from ...models import IMAGE_EXTENSIONS
from ...services.identity import AuthSession
from ...store import ContentStore, StoreError
from ..dependencies import get_store, require_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

MAX_IMAGE_BYTES = 10 * 1024 * 1024
IMAGE_WIDTH = 800

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def decode_image_data(image_data: str) -> bytes:
    """Decode base64 image data, with or without a ``data:`` URL prefix."""

    payload = _DATA_URL_PREFIX.sub("", image_data.strip(), count=1)
    return base64.b64decode(payload, validate=True)


@router.post("/api/upload-image")
def upload_image(
    body: Dict[str, Any],
    session: AuthSession = Depends(require_session),
    store: ContentStore = Depends(get_store),
):
    """Store a base64-encoded image and return its public URL."""

    image_data = body.get("imageData")
    if not image_data or not isinstance(image_data, str):
        raise HTTPException(400, "No image data provided")

    content_type = body.get("mimetype") or "image/jpeg"
    if content_type not in IMAGE_EXTENSIONS:
        raise HTTPException(400, "Unsupported image type")

    try:
        data = decode_image_data(image_data)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(400, "Invalid image data") from exc
    if not data:
        raise HTTPException(400, "No image data provided")
    if len(data) > MAX_IMAGE_BYTES:
        raise HTTPException(400, "File too large. Maximum size is 10MB.")

    filename = body.get("filename") or "image.jpg"
    try:
        asset = store.upload_image(data, filename, content_type)
    except StoreError as exc:
        logger.exception("image_upload_failed filename=%s", filename)
        raise HTTPException(500, f"Failed to upload image: {exc}") from exc

    return {
        "success": True,
        "imageUrl": store.image_url(asset, width=IMAGE_WIDTH),
        "assetId": asset.id,
    }


@router.get("/uploads/{path}")
def serve_upload(path: str):
    """Serve uploaded files."""

    root = UPLOAD_DIR.resolve()
    file_path = (root / path).resolve()
    if root not in file_path.parents or not file_path.is_file():
        raise HTTPException(404, "File not found")
    return FileResponse(file_path)


__all__ = ["decode_image_data", "router"]
