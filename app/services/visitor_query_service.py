"""
app/services/visitor_query_service.py

Read-only query surface over the arrivals time series and snapshot.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy.exc import SQLAlchemyError

from app.config import CovidImpactSettings
from app.domain.visitor_arrivals import (
    CovidImpact,
    DataSourceDescriptor,
    MonthlyTotal,
    StatsView,
    YearlyTotal,
)
from app.repositories.stats_snapshot_repository import StatsSnapshotRepository
from app.repositories.visitor_record_repository import VisitorRecordRepository
from app.services.acquisition_pipeline import AcquisitionPipeline
from db.storage import Storage

logger = logging.getLogger(__name__)


def build_covid_impact(
    yearly: list[YearlyTotal],
    *,
    baseline_year: int,
    trough_years: tuple[int, ...],
    recovery_year: int,
) -> list[CovidImpact]:
    """
    Compare each country's baseline year against its lowest year in the
    trough window and its recovery year.

    Countries without a positive baseline are omitted. A missing trough or
    recovery year counts as zero visitors.
    """

    by_country: dict[str, dict[int, int]] = defaultdict(dict)
    for row in yearly:
        by_country[row.country][row.year] = row.visitors

    impacts: list[CovidImpact] = []
    for country in sorted(by_country):
        totals = by_country[country]
        baseline = totals.get(baseline_year, 0)
        if baseline <= 0:
            continue
        trough = min((totals.get(year, 0) for year in trough_years), default=0)
        recovery = totals.get(recovery_year, 0)
        impacts.append(
            CovidImpact(
                country=country,
                pre_covid_baseline_visitors=baseline,
                trough_visitors=trough,
                recovery_visitors=recovery,
                decline_percent=round((baseline - trough) / baseline * 100, 1),
                recovery_percent=round(recovery / baseline * 100, 1),
            )
        )
    return impacts


class VisitorQueryService:
    """
    Queries used by the dashboard. Never writes.

    Storage failures are logged and answered with an empty result or the
    default snapshot so readers see stale or empty data rather than errors.
    """

    def __init__(
        self,
        *,
        storage: Storage,
        covid_settings: CovidImpactSettings,
        pipeline: AcquisitionPipeline | None = None,
    ) -> None:
        self._storage = storage
        self._covid_settings = covid_settings
        self._pipeline = pipeline

    def list_countries(self) -> set[str]:
        try:
            with self._storage.session_scope() as db:
                return VisitorRecordRepository(db).list_countries()
        except SQLAlchemyError as exc:
            logger.error("Country listing failed error=%s", exc)
            return set()

    def query_yearly(self) -> list[YearlyTotal]:
        try:
            with self._storage.session_scope() as db:
                return VisitorRecordRepository(db).yearly_totals()
        except SQLAlchemyError as exc:
            logger.error("Yearly query failed error=%s", exc)
            return []

    def query_monthly(self, year: int) -> list[MonthlyTotal]:
        try:
            with self._storage.session_scope() as db:
                return VisitorRecordRepository(db).monthly_totals(year=year)
        except SQLAlchemyError as exc:
            logger.error("Monthly query failed year=%s error=%s", year, exc)
            return []

    def query_current_stats(self) -> StatsView:
        try:
            with self._storage.session_scope() as db:
                snapshot = StatsSnapshotRepository(db).get_current()
        except SQLAlchemyError as exc:
            logger.error("Stats query failed error=%s", exc)
            return StatsView()
        if snapshot is None:
            return StatsView()
        return StatsView(
            total_visitors=snapshot.total_visitors,
            monthly_growth_percent=snapshot.monthly_growth_percent,
            top_country=snapshot.top_country,
            last_stats_update=snapshot.last_stats_update,
            last_ingest_update=snapshot.last_ingest_update,
        )

    def query_covid_impact(self) -> list[CovidImpact]:
        settings = self._covid_settings
        years = {settings.baseline_year, settings.recovery_year, *settings.trough_years}
        try:
            with self._storage.session_scope() as db:
                yearly = VisitorRecordRepository(db).yearly_totals(years=sorted(years))
        except SQLAlchemyError as exc:
            logger.error("COVID impact query failed error=%s", exc)
            return []
        return build_covid_impact(
            yearly,
            baseline_year=settings.baseline_year,
            trough_years=settings.trough_years,
            recovery_year=settings.recovery_year,
        )

    def list_data_sources(self) -> list[DataSourceDescriptor]:
        if self._pipeline is None:
            return []
        return self._pipeline.describe_sources()
