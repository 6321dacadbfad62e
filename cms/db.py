# =============================================================================
# File: cms/db.py
# Purpose: SQLAlchemy engine + session factory, shared by every request.
# =============================================================================
from __future__ import annotations

import logging

from flask import Flask, current_app
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for ORM models."""
    pass


class Store:
    """Lazily-connected handle on the database.

    The engine (and its connection pool) is built on first use and then
    reused for the lifetime of the app. Request handlers only ever open
    sessions on it.
    """

    def __init__(self, url: str):
        self.url = url
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None

    def _connect(self) -> None:
        log.info("Opening database engine for %s", self.url)
        self._engine = create_engine(self.url, echo=False, future=True)
        self._sessionmaker = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._connect()
        return self._engine

    def session(self) -> Session:
        """Return a new ORM session (use it as a context manager)."""
        if self._sessionmaker is None:
            self._connect()
        return self._sessionmaker()

    def create_all(self) -> None:
        """Create all tables if they don't exist."""
        # Import models so metadata sees them before create_all
        from . import models  # noqa: F401
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None


def init_db(app: Flask) -> Store:
    """Attach a Store to the app and make sure the schema exists."""
    store = Store(app.config["DATABASE_URL"])
    store.create_all()
    app.extensions["store"] = store
    return store


def get_store() -> Store:
    """Store of the current app."""
    return current_app.extensions["store"]
