"""Pytest fixtures for testing."""

import os
import tempfile

# Settings are read at import time, so configure them before importing the app.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["CONTENT_STORE"] = "sql"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FRONTEND_ORIGIN"] = "http://localhost:3000"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="blogsite-uploads-")
os.environ.pop("UNKNOWN_PROVIDER_POLICY", None)

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from blogsite.api.dependencies import get_current_session, get_store, page_cache  # noqa: E402
from blogsite.core import UPLOAD_DIR  # noqa: E402
from blogsite.services.identity import AuthSession, SessionUser  # noqa: E402
from blogsite.store import SqlContentStore  # noqa: E402


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections in one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(db: Session) -> SqlContentStore:
    return SqlContentStore(db, UPLOAD_DIR)


@pytest.fixture
def app(store: SqlContentStore) -> Generator[FastAPI]:
    from blogsite.app import app as blog_app

    blog_app.dependency_overrides[get_store] = lambda: store
    page_cache.invalidate()
    yield blog_app
    blog_app.dependency_overrides.clear()
    page_cache.invalidate()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def signed_in(app: FastAPI) -> AuthSession:
    """Treat every request as coming from a signed-in author named Ada."""
    session = AuthSession(user=SessionUser(name="Ada", email="ada@example.com"))
    app.dependency_overrides[get_current_session] = lambda: session
    return session
