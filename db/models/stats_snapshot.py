"""
db/models/stats_snapshot.py

Single-row store for the current arrivals summary.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

CURRENT_SNAPSHOT_ID = 1


class StatsSnapshot(Base):
    """
    The one logical "current" summary, overwritten in place on every
    recomputation. ``id`` is pinned to ``CURRENT_SNAPSHOT_ID``; there is no
    version history.
    """

    __tablename__ = "visitor_stats_snapshot"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CURRENT_SNAPSHOT_ID)
    total_visitors: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Summed arrivals for the current (year, month)",
    )
    monthly_growth_percent: Mapped[float] = mapped_column(Float, nullable=False)
    top_country: Mapped[str] = mapped_column(String(120), nullable=False)
    last_stats_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_ingest_update: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(f"id = {CURRENT_SNAPSHOT_ID}", name="single_row"),
    )
