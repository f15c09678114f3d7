"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.stats_snapshot import CURRENT_SNAPSHOT_ID, StatsSnapshot
from db.models.visitor_record import VisitorRecord, VisitorSource

__all__ = [
    "CURRENT_SNAPSHOT_ID",
    "StatsSnapshot",
    "VisitorRecord",
    "VisitorSource",
]
