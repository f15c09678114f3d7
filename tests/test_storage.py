"""
tests/test_storage.py

Pytest tests for the Storage handle.

Coverage
--------
- Readiness check against a live engine
- Missing-table detection
- Bounded readiness wait: slow checks count against the budget
- Sleeps are capped at the time left before the deadline
- Recovery part-way through the wait
- Zero budget checks exactly once
"""

from __future__ import annotations

import pytest
from sqlalchemy.engine import Engine

from conftest import RecordingSleep
from db.base import Base
from db.storage import Storage


class TestReadiness:
    def test_live_engine_is_ready(self, storage: Storage) -> None:
        assert storage.is_ready() is True

    def test_missing_tables_after_drop(self, storage: Storage, engine: Engine) -> None:
        expected = {"visitor_records", "visitor_stats_snapshot"}
        assert storage.missing_tables(expected) == set()

        Base.metadata.drop_all(engine)

        assert storage.missing_tables(expected) == expected


class TestWaitUntilReady:
    def test_slow_checks_count_against_the_budget(
        self,
        storage: Storage,
        sleep: RecordingSleep,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        checks: list[float] = []

        def hanging_check() -> bool:
            # Each check blocks for half a second, like a connect timeout.
            sleep.elapsed += 0.5
            checks.append(sleep.elapsed)
            return False

        monkeypatch.setattr(storage, "is_ready", hanging_check)

        ready = storage.wait_until_ready(
            max_wait_seconds=1.0,
            poll_interval_seconds=0.1,
            sleep=sleep,
            monotonic=sleep.monotonic,
        )

        assert ready is False
        assert len(checks) == 2
        assert sleep.calls == [0.1]
        assert sleep.elapsed < 1.5

    def test_sleep_is_capped_at_remaining_budget(
        self,
        unready: Storage,
        sleep: RecordingSleep,
    ) -> None:
        ready = unready.wait_until_ready(
            max_wait_seconds=1.0,
            poll_interval_seconds=0.75,
            sleep=sleep,
            monotonic=sleep.monotonic,
        )

        assert ready is False
        assert sleep.calls == [0.75, 0.25]
        assert sleep.elapsed == 1.0

    def test_returns_true_once_storage_answers(
        self,
        storage: Storage,
        sleep: RecordingSleep,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        answers = iter([False, False, True])
        monkeypatch.setattr(storage, "is_ready", lambda: next(answers))

        ready = storage.wait_until_ready(
            max_wait_seconds=10.0,
            poll_interval_seconds=2.0,
            sleep=sleep,
            monotonic=sleep.monotonic,
        )

        assert ready is True
        assert sleep.calls == [2.0, 2.0]

    def test_zero_budget_checks_once_without_sleeping(
        self,
        storage: Storage,
        sleep: RecordingSleep,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls: list[bool] = []

        def check() -> bool:
            calls.append(False)
            return False

        monkeypatch.setattr(storage, "is_ready", check)

        ready = storage.wait_until_ready(
            max_wait_seconds=0.0,
            poll_interval_seconds=1.0,
            sleep=sleep,
            monotonic=sleep.monotonic,
        )

        assert ready is False
        assert len(calls) == 1
        assert sleep.calls == []
