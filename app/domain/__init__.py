"""
app/domain package marker.
"""

from app.domain.visitor_arrivals import (
    AcquisitionResult,
    CovidImpact,
    DataSourceDescriptor,
    IngestionCycleResult,
    ManualIngestionResult,
    MonthlyTotal,
    StatsComputation,
    StatsView,
    VisitorObservation,
    YearlyTotal,
)

__all__ = [
    "AcquisitionResult",
    "CovidImpact",
    "DataSourceDescriptor",
    "IngestionCycleResult",
    "ManualIngestionResult",
    "MonthlyTotal",
    "StatsComputation",
    "StatsView",
    "VisitorObservation",
    "YearlyTotal",
]
