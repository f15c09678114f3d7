"""
db/storage.py

Storage handle shared by the ingestion, stats and query services.

One ``Storage`` is created at process start, passed explicitly to every
collaborator, and disposed on shutdown. It owns the SQLAlchemy engine and
session factory and answers the readiness questions the ingestion pipeline
asks before touching the database.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

logger = logging.getLogger(__name__)


class StorageInitializationError(RuntimeError):
    """
    Raised when the storage backend cannot be configured at process start.
    """


class StorageNotReadyError(RuntimeError):
    """
    Raised when an operation requires a reachable database and it is not.
    """


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_db_engine(database_url: str | None = None) -> Engine:
    """
    Create a PostgreSQL engine with production-safe pool defaults.
    """

    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    return create_engine(
        url,
        echo=_get_bool_env("SQL_ECHO", default=False),
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=_get_int_env("DB_POOL_SIZE", 5),
        max_overflow=_get_int_env("DB_MAX_OVERFLOW", 10),
        connect_args={"connect_timeout": max(1, _get_int_env("DB_CONNECT_TIMEOUT_SECONDS", 10))},
    )


class Storage:
    """
    Engine + session factory with readiness probing.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_environment(cls) -> Storage:
        """
        Build the process storage handle from environment configuration.

        Any configuration problem is fatal: it is raised as
        ``StorageInitializationError`` and the process must not start.
        """

        try:
            engine = create_db_engine()
        except Exception as exc:
            raise StorageInitializationError(f"Could not configure storage: {exc}") from exc
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a fresh session and ensure it is closed on exit."""
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def is_ready(self) -> bool:
        """
        Return True when a trivial round-trip to the database succeeds.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.debug("Storage readiness check failed error=%s", exc)
            return False
        return True

    def wait_until_ready(
        self,
        *,
        max_wait_seconds: float,
        poll_interval_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> bool:
        """
        Poll readiness until it succeeds or ``max_wait_seconds`` have passed.

        The budget is measured on ``monotonic`` and covers the checks
        themselves, so a check stuck on the connect timeout eats into it.
        No sleep runs past the deadline.
        """

        interval = max(poll_interval_seconds, 0.001)
        deadline = monotonic() + max(max_wait_seconds, 0.0)
        checks = 0
        while True:
            checks += 1
            if self.is_ready():
                return True
            remaining = deadline - monotonic()
            if remaining <= 0:
                break
            sleep(min(interval, remaining))
        logger.warning(
            "Storage not ready after waiting max_wait_seconds=%.1f checks=%s",
            max_wait_seconds,
            checks,
        )
        return False

    def missing_tables(self, expected: set[str]) -> set[str]:
        """Return the expected table names absent from the live schema."""
        actual = set(inspect(self._engine).get_table_names())
        return expected - actual

    def dispose(self) -> None:
        self._engine.dispose()
        logger.info("Storage engine disposed")
