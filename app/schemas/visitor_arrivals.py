"""
app/schemas/visitor_arrivals.py

Response schemas for the arrivals query and refresh endpoints.

Fields are snake_case in Python and serialize as camelCase, the key style
the dashboard reads such as `totalVisitors` and `declinePercent`.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class YearlyVisitorsResponse(CamelModel):
    year: int
    country: str
    visitors: int = Field(..., ge=0)


class MonthlyVisitorsResponse(CamelModel):
    month: int = Field(..., ge=1, le=12)
    country: str
    visitors: int = Field(..., ge=0)


class StatsSnapshotResponse(CamelModel):
    """
    Current summary; all defaults when no snapshot has been computed yet.
    """

    total_visitors: int = 0
    monthly_growth_percent: float = 0.0
    top_country: str = "N/A"
    last_stats_update: datetime | None = None
    last_ingest_update: datetime | None = None


class CovidImpactResponse(CamelModel):
    country: str
    pre_covid_baseline_visitors: int = Field(..., ge=0)
    trough_visitors: int = Field(..., ge=0)
    recovery_visitors: int = Field(..., ge=0)
    decline_percent: float
    recovery_percent: float


class DataSourceResponse(CamelModel):
    name: str
    source: str
    official: bool
    enabled: bool
    description: str = ""
    endpoints: list[str] = Field(default_factory=list)


class ManualIngestionResponse(CamelModel):
    success: bool
    updated: int = Field(0, ge=0)
    errors: int = Field(0, ge=0)
    source: str | None = None
    skipped_reason: str | None = None
