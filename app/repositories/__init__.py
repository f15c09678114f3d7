"""
app/repositories package marker.
"""

from app.repositories.stats_snapshot_repository import StatsSnapshotRepository
from app.repositories.visitor_record_repository import VisitorRecordRepository

__all__ = [
    "StatsSnapshotRepository",
    "VisitorRecordRepository",
]
