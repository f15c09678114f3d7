"""
app/scheduler/jobs.py

APScheduler-based timers for arrivals ingestion and stats refresh.

Schedule
--------
  ingestion_cycle     every INGESTION_INTERVAL_HOURS (default 6h)
  ingestion_startup   once, SCHEDULER_STARTUP_DELAY_SECONDS after start
                      (default 15s)
  stats_refresh       every STATS_REFRESH_INTERVAL_MINUTES (default 60m),
                      recomputes the snapshot without acquiring data

Jobs are fire-and-forget: failures are logged inside the job and never
propagate to the scheduler. Runs of *different* jobs may overlap; upserts
are idempotent and recomputation re-derives from stored rows. Set
INGESTION_SKIP_OVERLAPPING=true to make overlapping ingestion cycles skip.

Lifecycle
----------
Call ``build_scheduler()`` with the coordinator and stats service built for
the process storage handle. Start it on app boot; shut it down on exit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import SchedulerSettings
from app.services.ingestion_coordinator import IngestionCoordinator
from app.services.stats_service import StatsService

logger = logging.getLogger(__name__)

INGESTION_JOB_ID = "ingestion_cycle"
STARTUP_JOB_ID = "ingestion_startup"
STATS_JOB_ID = "stats_refresh"


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


def make_ingestion_job(coordinator: IngestionCoordinator) -> Callable[[], None]:
    def run_ingestion() -> None:
        logger.info("Scheduler: ingestion starting")
        try:
            result = coordinator.run_ingestion_cycle()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Scheduler: ingestion failed: %s", exc)
            return
        logger.info(
            "Scheduler: ingestion complete updated=%s errors=%s source=%s skipped=%s",
            result.updated,
            result.errors,
            result.source,
            result.skipped_reason,
        )

    return run_ingestion


def make_stats_job(stats_service: StatsService) -> Callable[[], None]:
    def run_stats_refresh() -> None:
        logger.info("Scheduler: stats_refresh starting")
        try:
            ok = stats_service.recompute_stats()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Scheduler: stats_refresh failed: %s", exc)
            return
        if not ok:
            logger.warning("Scheduler: stats_refresh failed after retries; previous snapshot kept")
            return
        logger.info("Scheduler: stats_refresh complete")

    return run_stats_refresh


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(
    *,
    coordinator: IngestionCoordinator,
    stats_service: StatsService,
    settings: SchedulerSettings,
    now: datetime | None = None,
) -> BackgroundScheduler:
    """
    Build and register the periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """

    scheduler = BackgroundScheduler(timezone="UTC")
    run_ingestion = make_ingestion_job(coordinator)
    started_at = now or datetime.now(tz=timezone.utc)

    scheduler.add_job(
        run_ingestion,
        trigger="interval",
        hours=settings.ingestion_interval_hours,
        id=INGESTION_JOB_ID,
        name="Arrivals ingestion cycle",
        replace_existing=True,
        misfire_grace_time=settings.misfire_grace_seconds,
    )
    scheduler.add_job(
        run_ingestion,
        trigger="date",
        run_date=started_at + timedelta(seconds=settings.startup_delay_seconds),
        id=STARTUP_JOB_ID,
        name="Arrivals ingestion after startup",
        replace_existing=True,
        misfire_grace_time=settings.misfire_grace_seconds,
    )
    scheduler.add_job(
        make_stats_job(stats_service),
        trigger="interval",
        minutes=settings.stats_refresh_interval_minutes,
        id=STATS_JOB_ID,
        name="Arrivals stats refresh",
        replace_existing=True,
        misfire_grace_time=settings.misfire_grace_seconds,
    )

    return scheduler
