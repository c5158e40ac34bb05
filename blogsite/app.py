"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel
from starlette.middleware.sessions import SessionMiddleware

from . import __version__, models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .api.dependencies import sanity_store
from .core import (
    ALLOWED_CORS_ORIGINS,
    CONTENT_STORE,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    LOG_LEVEL,
    SECRET_KEY,
    SESSION_MAX_AGE,
    UPLOAD_DIR,
    configure_logging,
    engine,
)
from .store import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if CONTENT_STORE == "sql":
        UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        if DB_RESET:
            SQLModel.metadata.drop_all(engine)
        SQLModel.metadata.create_all(engine)
    logger.info("startup content_store=%s", CONTENT_STORE)
    yield
    if CONTENT_STORE == "sanity":
        sanity_store().client.close()


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("unhandled_store_error path=%s error=%s", request.url.path, exc)
    return JSONResponse({"detail": "Content store unavailable"}, status_code=503)


def create_app() -> FastAPI:
    configure_logging(LOG_LEVEL)
    app = FastAPI(title="Blog API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie="sid",
        max_age=SESSION_MAX_AGE,
        https_only=COOKIE_SECURE,
        same_site=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
    )
    app.add_exception_handler(StoreError, store_error_handler)

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("blogsite.app:app", host="127.0.0.1", port=3000, reload=True)
