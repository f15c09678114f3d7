"""
app/repositories/visitor_record_repository.py

Persistence and aggregation queries for the monthly arrivals time series.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.domain.visitor_arrivals import MonthlyTotal, VisitorObservation, YearlyTotal
from app.repositories.upsert import dialect_insert
from db.base import utc_now
from db.models.visitor_record import VisitorRecord, VisitorSource


class VisitorRecordRepository:
    """
    Repository for writing and aggregating ``VisitorRecord`` rows.

    Upsert semantics: writing an observation whose ``(year, month, country)``
    already exists replaces visitors, source, official and observed_at
    (last write wins) instead of inserting a duplicate.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert_record(self, observation: VisitorObservation) -> None:
        """
        Insert or overwrite the row keyed by the observation's
        ``(year, month, country)``.

        Raises ``ValueError`` for an unknown provenance tag; constraint
        violations surface as ``sqlalchemy.exc.IntegrityError``.
        """

        if observation.source not in VisitorSource.ALL:
            raise ValueError(f"Unknown visitor source '{observation.source}'.")

        stmt = dialect_insert(self._session, VisitorRecord).values(
            year=observation.year,
            month=observation.month,
            country=observation.country,
            visitors=observation.visitors,
            source=observation.source,
            official=observation.official,
            observed_at=observation.observed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["year", "month", "country"],
            set_={
                "visitors": stmt.excluded.visitors,
                "source": stmt.excluded.source,
                "official": stmt.excluded.official,
                "observed_at": stmt.excluded.observed_at,
                "updated_at": utc_now(),
            },
        )
        self._session.execute(stmt)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_countries(self) -> set[str]:
        stmt = select(VisitorRecord.country).distinct()
        return set(self._session.scalars(stmt).all())

    def month_total(self, *, year: int, month: int) -> int:
        """Summed visitors over all countries for one (year, month); 0 when absent."""
        stmt = select(func.coalesce(func.sum(VisitorRecord.visitors), 0)).where(
            VisitorRecord.year == year,
            VisitorRecord.month == month,
        )
        return int(self._session.execute(stmt).scalar_one())

    def country_totals_for_month(self, *, year: int, month: int) -> dict[str, int]:
        """Summed visitors per country for one (year, month), ordered by country."""
        stmt = (
            select(VisitorRecord.country, func.sum(VisitorRecord.visitors))
            .where(VisitorRecord.year == year, VisitorRecord.month == month)
            .group_by(VisitorRecord.country)
            .order_by(VisitorRecord.country)
        )
        return {country: int(total) for country, total in self._session.execute(stmt).all()}

    def yearly_totals(self, *, years: Iterable[int] | None = None) -> list[YearlyTotal]:
        """Visitors summed by year x country, ordered by year then country."""
        stmt = (
            select(
                VisitorRecord.year,
                VisitorRecord.country,
                func.sum(VisitorRecord.visitors),
            )
            .group_by(VisitorRecord.year, VisitorRecord.country)
            .order_by(VisitorRecord.year, VisitorRecord.country)
        )
        if years is not None:
            stmt = stmt.where(VisitorRecord.year.in_(list(years)))
        return [
            YearlyTotal(year=year, country=country, visitors=int(total))
            for year, country, total in self._session.execute(stmt).all()
        ]

    def monthly_totals(self, *, year: int) -> list[MonthlyTotal]:
        """Visitors summed by month x country for one year."""
        stmt = (
            select(
                VisitorRecord.month,
                VisitorRecord.country,
                func.sum(VisitorRecord.visitors),
            )
            .where(VisitorRecord.year == year)
            .group_by(VisitorRecord.month, VisitorRecord.country)
            .order_by(VisitorRecord.month, VisitorRecord.country)
        )
        return [
            MonthlyTotal(month=month, country=country, visitors=int(total))
            for month, country, total in self._session.execute(stmt).all()
        ]
