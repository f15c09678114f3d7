"""
app/domain/visitor_arrivals.py

Domain models shared by acquisition, ingestion, stats and query services.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from db.models.visitor_record import VisitorSource


@dataclass(frozen=True)
class VisitorObservation:
    """
    One acquired (year, month, country) arrivals value, not yet persisted.
    """

    year: int
    month: int
    country: str
    visitors: int
    source: str
    observed_at: datetime
    official: bool = True

    @property
    def key(self) -> tuple[int, int, str]:
        return (self.year, self.month, self.country)

    def with_provenance(self, source: str) -> VisitorObservation:
        """
        Re-tag the observation with the tier that produced it.

        External-provider values are never official.
        """

        official = self.official and source != VisitorSource.EXTERNAL
        return replace(self, source=source, official=official)


@dataclass(frozen=True)
class AcquisitionResult:
    """
    Output of one pass through the acquisition tiers.

    ``source`` is None when every tier came back empty.
    """

    source: str | None
    records: tuple[VisitorObservation, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class IngestionCycleResult:
    updated: int
    errors: int
    source: str | None = None
    skipped_reason: str | None = None
    stats_refreshed: bool = False

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


@dataclass(frozen=True)
class ManualIngestionResult:
    success: bool
    cycle: IngestionCycleResult | None = None


@dataclass(frozen=True)
class StatsComputation:
    """
    Derived summary for one (year, month), before it is written.
    """

    year: int
    month: int
    total_visitors: int
    previous_total: int
    monthly_growth_percent: float
    top_country: str


@dataclass(frozen=True)
class StatsView:
    """
    Read model of the current snapshot. All-default when nothing has been
    computed yet.
    """

    total_visitors: int = 0
    monthly_growth_percent: float = 0.0
    top_country: str = "N/A"
    last_stats_update: datetime | None = None
    last_ingest_update: datetime | None = None


@dataclass(frozen=True)
class YearlyTotal:
    year: int
    country: str
    visitors: int


@dataclass(frozen=True)
class MonthlyTotal:
    month: int
    country: str
    visitors: int


@dataclass(frozen=True)
class CovidImpact:
    country: str
    pre_covid_baseline_visitors: int
    trough_visitors: int
    recovery_visitors: int
    decline_percent: float
    recovery_percent: float


@dataclass(frozen=True)
class DataSourceDescriptor:
    name: str
    source: str
    official: bool
    enabled: bool
    description: str = ""
    endpoints: tuple[str, ...] = field(default_factory=tuple)


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return the (year, month) before the given one, rolling over January."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def trailing_months(year: int, month: int, count: int = 12) -> list[tuple[int, int]]:
    """
    Return ``count`` consecutive (year, month) pairs ending at the given
    month, oldest first.
    """

    months: list[tuple[int, int]] = []
    current = (year, month)
    for _ in range(count):
        months.append(current)
        current = previous_month(*current)
    months.reverse()
    return months
