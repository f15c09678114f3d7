"""
app/api/routers/tourism_data.py

Read-only arrivals endpoints consumed by the dashboard, plus manual refresh.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from app.api.dependencies import get_runtime
from app.runtime import ArrivalsRuntime
from app.schemas.visitor_arrivals import (
    CovidImpactResponse,
    DataSourceResponse,
    ManualIngestionResponse,
    MonthlyVisitorsResponse,
    StatsSnapshotResponse,
    YearlyVisitorsResponse,
)

router = APIRouter(prefix="/api", tags=["tourism-data"])


@router.get("/countries", response_model=list[str])
def list_countries(runtime: ArrivalsRuntime = Depends(get_runtime)) -> list[str]:
    return sorted(runtime.query_service.list_countries())


@router.get("/tourism-data/yearly", response_model=list[YearlyVisitorsResponse])
def tourism_data_yearly(
    runtime: ArrivalsRuntime = Depends(get_runtime),
) -> list[YearlyVisitorsResponse]:
    return [
        YearlyVisitorsResponse(year=row.year, country=row.country, visitors=row.visitors)
        for row in runtime.query_service.query_yearly()
    ]


@router.get("/tourism-data/monthly/{year}", response_model=list[MonthlyVisitorsResponse])
def tourism_data_monthly(
    year: int = Path(..., ge=1900, le=2100),
    runtime: ArrivalsRuntime = Depends(get_runtime),
) -> list[MonthlyVisitorsResponse]:
    return [
        MonthlyVisitorsResponse(month=row.month, country=row.country, visitors=row.visitors)
        for row in runtime.query_service.query_monthly(year)
    ]


@router.get("/stats", response_model=StatsSnapshotResponse)
def current_stats(runtime: ArrivalsRuntime = Depends(get_runtime)) -> StatsSnapshotResponse:
    view = runtime.query_service.query_current_stats()
    return StatsSnapshotResponse(
        total_visitors=view.total_visitors,
        monthly_growth_percent=view.monthly_growth_percent,
        top_country=view.top_country,
        last_stats_update=view.last_stats_update,
        last_ingest_update=view.last_ingest_update,
    )


@router.get("/covid-impact", response_model=list[CovidImpactResponse])
def covid_impact(runtime: ArrivalsRuntime = Depends(get_runtime)) -> list[CovidImpactResponse]:
    return [
        CovidImpactResponse(
            country=row.country,
            pre_covid_baseline_visitors=row.pre_covid_baseline_visitors,
            trough_visitors=row.trough_visitors,
            recovery_visitors=row.recovery_visitors,
            decline_percent=row.decline_percent,
            recovery_percent=row.recovery_percent,
        )
        for row in runtime.query_service.query_covid_impact()
    ]


@router.get("/data-sources", response_model=list[DataSourceResponse])
def data_sources(runtime: ArrivalsRuntime = Depends(get_runtime)) -> list[DataSourceResponse]:
    return [
        DataSourceResponse(
            name=source.name,
            source=source.source,
            official=source.official,
            enabled=source.enabled,
            description=source.description,
            endpoints=list(source.endpoints),
        )
        for source in runtime.query_service.list_data_sources()
    ]


@router.post("/refresh-jnto-data", response_model=ManualIngestionResponse)
def refresh_data(runtime: ArrivalsRuntime = Depends(get_runtime)) -> ManualIngestionResponse:
    """
    Run one ingestion cycle synchronously and report the outcome.
    """

    result = runtime.coordinator.trigger_manual_ingestion()
    cycle = result.cycle
    return ManualIngestionResponse(
        success=result.success,
        updated=cycle.updated if cycle else 0,
        errors=cycle.errors if cycle else 0,
        source=cycle.source if cycle else None,
        skipped_reason=cycle.skipped_reason if cycle else None,
    )
