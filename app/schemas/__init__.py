"""
app/schemas package marker.
"""

from app.schemas.visitor_arrivals import (
    CovidImpactResponse,
    DataSourceResponse,
    ManualIngestionResponse,
    MonthlyVisitorsResponse,
    StatsSnapshotResponse,
    YearlyVisitorsResponse,
)

__all__ = [
    "CovidImpactResponse",
    "DataSourceResponse",
    "ManualIngestionResponse",
    "MonthlyVisitorsResponse",
    "StatsSnapshotResponse",
    "YearlyVisitorsResponse",
]
