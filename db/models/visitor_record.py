"""
db/models/visitor_record.py

Monthly visitor-arrival time series, one row per (year, month, country).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

VISITOR_RECORD_UPSERT_CONSTRAINT = "uq_visitor_records_year_month_country"


class VisitorSource:
    PRIMARY = "primary"
    SECONDARY = "secondary"
    EXTERNAL = "external"

    ALL = (PRIMARY, SECONDARY, EXTERNAL)


class VisitorRecord(Base, TimestampMixin):
    """
    Arrivals for one origin country in one calendar month.

    The unique constraint on ``(year, month, country)`` drives upsert
    semantics: a later ingestion for the same key overwrites ``visitors``,
    ``source``, ``official`` and ``observed_at`` in place.
    """

    __tablename__ = "visitor_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False, comment="Calendar month, 1-12")
    country: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Origin country, normalized to the configured allow-list",
    )
    visitors: Mapped[int] = mapped_column(BigInteger, nullable=False)
    source: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="primary, secondary, external",
    )
    official: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the acquisition tier produced this value (UTC)",
    )

    __table_args__ = (
        UniqueConstraint("year", "month", "country", name=VISITOR_RECORD_UPSERT_CONSTRAINT),
        CheckConstraint("month >= 1 AND month <= 12", name="month_range"),
        CheckConstraint("visitors >= 0", name="visitors_non_negative"),
        Index("ix_visitor_records_year_month", "year", "month"),
        Index("ix_visitor_records_country", "country"),
    )

    def __repr__(self) -> str:
        return (
            f"VisitorRecord(year={self.year}, month={self.month}, "
            f"country={self.country!r}, visitors={self.visitors}, source={self.source!r})"
        )
