"""
tests/conftest.py

Shared fixtures: in-memory SQLite storage, a fixed clock, recorded sleeps
and stub acquisition tiers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers all ORM models on Base.metadata
from app.config import ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult
from app.domain.visitor_arrivals import VisitorObservation
from app.repositories.visitor_record_repository import VisitorRecordRepository
from db.base import Base
from db.models.visitor_record import VisitorRecord, VisitorSource
from db.storage import Storage

FIXED_NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def storage(engine: Engine) -> Storage:
    return Storage(engine)


@pytest.fixture()
def unready(storage: Storage, monkeypatch: pytest.MonkeyPatch) -> Storage:
    """Storage whose readiness check always fails."""
    monkeypatch.setattr(storage, "is_ready", lambda: False)
    return storage


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class RecordingSleep:
    """
    Fake sleep that records each call and advances its own monotonic clock.
    """

    def __init__(self) -> None:
        self.calls: list[float] = []
        self.elapsed = 0.0

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.elapsed += seconds

    def monotonic(self) -> float:
        return self.elapsed


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


def fixed_clock(moment: datetime = FIXED_NOW) -> Callable[[], datetime]:
    return lambda: moment


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def make_observation(
    *,
    year: int = 2025,
    month: int = 3,
    country: str = "South Korea",
    visitors: int = 1000,
    source: str = VisitorSource.PRIMARY,
    official: bool = True,
    observed_at: datetime = FIXED_NOW,
) -> VisitorObservation:
    return VisitorObservation(
        year=year,
        month=month,
        country=country,
        visitors=visitors,
        source=source,
        official=official,
        observed_at=observed_at,
    )


def seed_records(storage: Storage, observations: Iterable[VisitorObservation]) -> None:
    with storage.session_scope() as db:
        repository = VisitorRecordRepository(db)
        for observation in observations:
            repository.upsert_record(observation)
        db.commit()


def stored_records(storage: Storage) -> list[VisitorRecord]:
    stmt = select(VisitorRecord).order_by(VisitorRecord.year, VisitorRecord.month, VisitorRecord.country)
    with storage.session_scope() as db:
        return list(db.scalars(stmt).all())


def stored_record(
    storage: Storage,
    *,
    year: int = 2025,
    month: int = 3,
    country: str = "South Korea",
) -> VisitorRecord | None:
    stmt = select(VisitorRecord).where(
        VisitorRecord.year == year,
        VisitorRecord.month == month,
        VisitorRecord.country == country,
    )
    with storage.session_scope() as db:
        return db.scalars(stmt).one_or_none()


# ---------------------------------------------------------------------------
# Acquisition tiers
# ---------------------------------------------------------------------------


class StubConnector(BaseConnector):
    """
    Tier returning canned records, or raising ``error`` when set.
    """

    def __init__(
        self,
        *,
        source: str,
        records: list[VisitorObservation] | None = None,
        error: Exception | None = None,
        enabled: bool = True,
        on_fetch: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(
            source=source,
            name=f"stub_{source}",
            http_settings=ExternalHTTPSettings(),
            enabled=enabled,
        )
        self.official = source != VisitorSource.EXTERNAL
        self._records = list(records or [])
        self._error = error
        self._on_fetch = on_fetch
        self.calls = 0

    def fetch_records(self) -> ConnectorFetchResult:
        self.calls += 1
        if self._on_fetch is not None:
            self._on_fetch()
        if self._error is not None:
            raise self._error
        return ConnectorFetchResult(source=self.source, records=list(self._records))
