"""Database engine initialization and session management."""

from __future__ import annotations

from sqlalchemy.engine import URL
from sqlmodel import Session, SQLModel, create_engine

# Import models so SQLModel registers them
from myclinic.storage import models as _models  # noqa: F401

_engines: dict[str, object] = {}


def get_engine(url: URL | str):
    """Get or create a SQLAlchemy engine for the given database URL.

    Tables are created on first use, existing tables are left untouched.
    """
    key = url.render_as_string(hide_password=False) if isinstance(url, URL) else url
    if key not in _engines:
        engine = create_engine(url, echo=False, pool_pre_ping=True)
        SQLModel.metadata.create_all(engine)
        _engines[key] = engine
    return _engines[key]


def get_session(url: URL | str) -> Session:
    """Create a new database session."""
    engine = get_engine(url)
    return Session(engine)
