"""
app/repositories/stats_snapshot_repository.py

Persistence for the single current ``StatsSnapshot`` row.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.domain.visitor_arrivals import StatsComputation
from app.repositories.upsert import dialect_insert
from db.models.stats_snapshot import CURRENT_SNAPSHOT_ID, StatsSnapshot


class StatsSnapshotRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_current(self) -> StatsSnapshot | None:
        return self._session.get(StatsSnapshot, CURRENT_SNAPSHOT_ID, populate_existing=True)

    def upsert_current(self, computation: StatsComputation, *, computed_at: datetime) -> None:
        """
        Write the computed summary into the single snapshot row.

        ``last_ingest_update`` is left as it is on conflict; it belongs to
        the ingestion cycle, not the recomputation.
        """

        values = {
            "total_visitors": computation.total_visitors,
            "monthly_growth_percent": computation.monthly_growth_percent,
            "top_country": computation.top_country,
            "last_stats_update": computed_at,
        }
        stmt = dialect_insert(self._session, StatsSnapshot).values(id=CURRENT_SNAPSHOT_ID, **values)
        stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=values)
        self._session.execute(stmt)

    def stamp_ingest(self, *, ingested_at: datetime) -> bool:
        """
        Record the last ingestion time on the existing snapshot.

        Returns False when no snapshot exists yet; no placeholder row is
        created.
        """

        stmt = (
            update(StatsSnapshot)
            .where(StatsSnapshot.id == CURRENT_SNAPSHOT_ID)
            .values(last_ingest_update=ingested_at)
        )
        result = self._session.execute(stmt)
        return bool(result.rowcount)
