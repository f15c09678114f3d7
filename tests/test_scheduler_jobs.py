"""
tests/test_scheduler_jobs.py

Pytest tests for the APScheduler job registration.

Coverage
--------
- Three jobs registered with the configured triggers
- Startup ingestion fires once after the configured delay
- Job callables log and swallow failures
- Exhausted stats retries are reported as a failure
"""

from __future__ import annotations

import logging
from datetime import timedelta
from unittest.mock import Mock

import pytest
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.config import SchedulerSettings
from app.domain.visitor_arrivals import IngestionCycleResult
from app.scheduler.jobs import (
    INGESTION_JOB_ID,
    STARTUP_JOB_ID,
    STATS_JOB_ID,
    build_scheduler,
    make_ingestion_job,
    make_stats_job,
)
from conftest import FIXED_NOW

SETTINGS = SchedulerSettings(
    ingestion_interval_hours=6.0,
    startup_delay_seconds=15.0,
    stats_refresh_interval_minutes=60.0,
)


class TestBuildScheduler:
    def test_registers_three_jobs_with_expected_triggers(self) -> None:
        scheduler = build_scheduler(
            coordinator=Mock(),
            stats_service=Mock(),
            settings=SETTINGS,
            now=FIXED_NOW,
        )

        jobs = {job.id: job for job in scheduler.get_jobs()}

        assert set(jobs) == {INGESTION_JOB_ID, STARTUP_JOB_ID, STATS_JOB_ID}
        assert not scheduler.running

        ingestion = jobs[INGESTION_JOB_ID].trigger
        assert isinstance(ingestion, IntervalTrigger)
        assert ingestion.interval == timedelta(hours=6)

        startup = jobs[STARTUP_JOB_ID].trigger
        assert isinstance(startup, DateTrigger)
        assert startup.run_date == FIXED_NOW + timedelta(seconds=15)

        stats = jobs[STATS_JOB_ID].trigger
        assert isinstance(stats, IntervalTrigger)
        assert stats.interval == timedelta(minutes=60)


class TestJobs:
    def test_ingestion_job_runs_one_cycle(self) -> None:
        coordinator = Mock()
        coordinator.run_ingestion_cycle.return_value = IngestionCycleResult(updated=3, errors=0)

        make_ingestion_job(coordinator)()

        coordinator.run_ingestion_cycle.assert_called_once_with()

    def test_ingestion_job_swallows_failures(self) -> None:
        coordinator = Mock()
        coordinator.run_ingestion_cycle.side_effect = RuntimeError("db gone")

        make_ingestion_job(coordinator)()

        coordinator.run_ingestion_cycle.assert_called_once_with()

    def test_stats_job_swallows_failures(self) -> None:
        stats_service = Mock()
        stats_service.recompute_stats.side_effect = RuntimeError("db gone")

        make_stats_job(stats_service)()

        stats_service.recompute_stats.assert_called_once_with()

    def test_stats_job_reports_exhausted_retries(self, caplog: pytest.LogCaptureFixture) -> None:
        stats_service = Mock()
        stats_service.recompute_stats.return_value = False

        with caplog.at_level(logging.WARNING, logger="app.scheduler.jobs"):
            make_stats_job(stats_service)()

        stats_service.recompute_stats.assert_called_once_with()
        assert "stats_refresh failed after retries" in caplog.text
        assert "storage not ready" not in caplog.text
