"""Database engine configuration."""

from __future__ import annotations

from pathlib import Path

from sqlmodel import create_engine

from .config import DATABASE_URL

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DATA_DIR = _PROJECT_ROOT / "data"


def _default_url() -> str:
    _DATA_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{_DATA_DIR / 'app.db'}"


_DB_URL = DATABASE_URL or _default_url()
_CONNECT_ARGS = {"check_same_thread": False} if _DB_URL.startswith("sqlite") else {}

engine = create_engine(_DB_URL, connect_args=_CONNECT_ARGS)


__all__ = ["engine"]
