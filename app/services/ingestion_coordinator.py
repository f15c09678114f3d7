"""
app/services/ingestion_coordinator.py

One ingestion cycle: readiness check, acquisition, per-record upsert,
snapshot recomputation and ingest timestamp.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from app.config import IngestionSettings
from app.domain.visitor_arrivals import (
    IngestionCycleResult,
    ManualIngestionResult,
    VisitorObservation,
)
from app.repositories.stats_snapshot_repository import StatsSnapshotRepository
from app.repositories.visitor_record_repository import VisitorRecordRepository
from app.services.acquisition_pipeline import AcquisitionPipeline
from app.services.stats_service import StatsService
from db.storage import Storage

logger = logging.getLogger(__name__)

SKIP_STORAGE_NOT_READY = "storage_not_ready"
SKIP_CYCLE_IN_PROGRESS = "cycle_in_progress"


class IngestionCoordinator:
    """
    Sole writer of the time series and the stats snapshot.

    When ``settings.skip_overlapping`` is set, a cycle that starts while
    another one is running returns immediately as skipped instead of
    queueing behind it. Otherwise overlapping cycles are allowed; upserts
    are idempotent and recomputation is a pure re-derivation.
    """

    def __init__(
        self,
        *,
        storage: Storage,
        pipeline: AcquisitionPipeline,
        stats_service: StatsService,
        settings: IngestionSettings,
        country_allow_list: tuple[str, ...] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._storage = storage
        self._pipeline = pipeline
        self._stats_service = stats_service
        self._settings = settings
        self._country_allow_list = frozenset(country_allow_list) if country_allow_list else None
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._cycle_lock = threading.Lock()

    def run_ingestion_cycle(self) -> IngestionCycleResult:
        if not self._settings.skip_overlapping:
            return self._run_cycle()

        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("Ingestion cycle skipped: another cycle is in progress")
            return IngestionCycleResult(updated=0, errors=0, skipped_reason=SKIP_CYCLE_IN_PROGRESS)
        try:
            return self._run_cycle()
        finally:
            self._cycle_lock.release()

    def trigger_manual_ingestion(self) -> ManualIngestionResult:
        """
        Run one cycle synchronously on behalf of an operator request.
        """

        logger.info("Manual ingestion requested")
        try:
            cycle = self.run_ingestion_cycle()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Manual ingestion failed error=%s", exc)
            return ManualIngestionResult(success=False)
        return ManualIngestionResult(success=not cycle.skipped, cycle=cycle)

    def _run_cycle(self) -> IngestionCycleResult:
        logger.info("Ingestion cycle starting")
        if not self._storage.is_ready():
            logger.warning("Ingestion cycle skipped: storage not ready, next scheduled run will retry")
            return IngestionCycleResult(updated=0, errors=0, skipped_reason=SKIP_STORAGE_NOT_READY)

        acquired = self._pipeline.acquire()
        if acquired.is_empty:
            logger.warning("Ingestion cycle acquired no data, nothing to update")
            return IngestionCycleResult(updated=0, errors=0)

        updated, errors = self._upsert_records(acquired.records)
        stats_refreshed = self._stats_service.recompute_stats()
        if not stats_refreshed:
            logger.error("Stats recomputation failed; previous snapshot left in place")
        self._stamp_ingest()

        logger.info(
            "Ingestion cycle complete source=%s updated=%s errors=%s stats_refreshed=%s",
            acquired.source,
            updated,
            errors,
            stats_refreshed,
        )
        return IngestionCycleResult(
            updated=updated,
            errors=errors,
            source=acquired.source,
            stats_refreshed=stats_refreshed,
        )

    def _upsert_records(self, records: tuple[VisitorObservation, ...]) -> tuple[int, int]:
        """
        Write each record in its own transaction so one failure only costs
        that record.
        """

        updated = 0
        errors = 0
        with self._storage.session_scope() as db:
            repository = VisitorRecordRepository(db)
            for record in records:
                try:
                    self._validate(record)
                    repository.upsert_record(record)
                    db.commit()
                    updated += 1
                except (SQLAlchemyError, ValueError) as exc:
                    db.rollback()
                    errors += 1
                    logger.error(
                        "Upsert failed year=%s month=%s country=%s error=%s",
                        record.year,
                        record.month,
                        record.country,
                        exc,
                    )
        return updated, errors

    def _validate(self, record: VisitorObservation) -> None:
        if self._country_allow_list is not None and record.country not in self._country_allow_list:
            raise ValueError(f"Country '{record.country}' is not on the allow-list.")
        if record.visitors < 0:
            raise ValueError("Visitor count must be non-negative.")

    def _stamp_ingest(self) -> None:
        try:
            with self._storage.session_scope() as db:
                stamped = StatsSnapshotRepository(db).stamp_ingest(ingested_at=self._clock())
                db.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to stamp ingest time error=%s", exc)
            return
        if not stamped:
            logger.warning("No stats snapshot yet; ingest time not recorded")
