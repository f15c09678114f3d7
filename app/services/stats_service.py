"""
app/services/stats_service.py

Retry-guarded recomputation of the current arrivals snapshot.

The database may take tens of seconds to accept connections after a cold
start. A recomputation against an unready backend would persist a zero
snapshot, so each attempt first waits for readiness and an attempt that
cannot reach the database counts as failed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from app.config import StatsSettings
from app.domain.visitor_arrivals import StatsComputation, previous_month
from app.repositories.stats_snapshot_repository import StatsSnapshotRepository
from app.repositories.visitor_record_repository import VisitorRecordRepository
from db.storage import Storage, StorageNotReadyError

logger = logging.getLogger(__name__)

NO_TOP_COUNTRY = "N/A"


def compute_growth_percent(current_total: int, previous_total: int) -> float:
    """
    Month-over-month growth rounded to one decimal.

    A zero or missing previous total is treated as 1.
    """

    previous = previous_total or 1
    return round((current_total - previous) / previous * 100, 1)


def pick_top_country(country_totals: Mapping[str, int]) -> str:
    """
    Country with the highest total; ties go to the alphabetically first name.
    """

    if not country_totals:
        return NO_TOP_COUNTRY
    return min(country_totals.items(), key=lambda item: (-item[1], item[0]))[0]


def compute_stats(
    *,
    year: int,
    month: int,
    current_total: int,
    previous_total: int,
    country_totals: Mapping[str, int],
) -> StatsComputation:
    return StatsComputation(
        year=year,
        month=month,
        total_visitors=current_total,
        previous_total=previous_total or 1,
        monthly_growth_percent=compute_growth_percent(current_total, previous_total),
        top_country=pick_top_country(country_totals),
    )


class StatsService:
    """
    Derives the current snapshot from the time series and writes it.
    """

    def __init__(
        self,
        *,
        storage: Storage,
        settings: StatsSettings,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep
        self._monotonic = monotonic

    def recompute_stats(self, max_attempts: int | None = None) -> bool:
        """
        Recompute and upsert the snapshot, retrying with linear backoff.

        Returns False once every attempt has failed; the existing snapshot
        is left untouched in that case.
        """

        attempts = max(1, max_attempts if max_attempts is not None else self._settings.max_attempts)
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                computation = self._recompute_once()
            except Exception as exc:  # noqa: BLE001
                last_error = exc
                logger.warning(
                    "Stats recomputation attempt failed attempt=%s/%s error=%s",
                    attempt,
                    attempts,
                    exc,
                )
                if attempt < attempts:
                    self._sleep(self._settings.backoff_base_seconds * attempt)
                continue

            logger.info(
                "Stats updated year=%s month=%s total=%s growth=%.1f%% top=%s attempt=%s",
                computation.year,
                computation.month,
                computation.total_visitors,
                computation.monthly_growth_percent,
                computation.top_country,
                attempt,
            )
            return True

        logger.error(
            "Stats recomputation exhausted retries attempts=%s error=%s",
            attempts,
            last_error,
        )
        return False

    def _recompute_once(self) -> StatsComputation:
        ready = self._storage.wait_until_ready(
            max_wait_seconds=self._settings.readiness_wait_seconds,
            poll_interval_seconds=self._settings.readiness_poll_seconds,
            sleep=self._sleep,
            monotonic=self._monotonic,
        )
        if not ready:
            raise StorageNotReadyError("Storage not ready for stats recomputation.")

        now = self._clock()
        year, month = now.year, now.month
        prev_year, prev_month = previous_month(year, month)

        with self._storage.session_scope() as db:
            records = VisitorRecordRepository(db)
            computation = compute_stats(
                year=year,
                month=month,
                current_total=records.month_total(year=year, month=month),
                previous_total=records.month_total(year=prev_year, month=prev_month),
                country_totals=records.country_totals_for_month(year=year, month=month),
            )
            try:
                StatsSnapshotRepository(db).upsert_current(computation, computed_at=now)
                db.commit()
            except Exception:
                db.rollback()
                raise
        return computation
