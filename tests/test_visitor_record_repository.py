"""
tests/test_visitor_record_repository.py

Pytest tests for VisitorRecordRepository against in-memory SQLite.

Coverage
--------
- Upsert is last-write-wins per (year, month, country)
- Upsert replaces provenance fields, not just visitors
- Yearly totals equal the sum of the monthly rows
- Monthly totals are scoped to one year
- Distinct country listing
- Month total for an absent month
- Unknown provenance tag is rejected
"""

from __future__ import annotations

from collections import defaultdict

import pytest
from sqlalchemy import func, select

from app.repositories.visitor_record_repository import VisitorRecordRepository
from conftest import make_observation, seed_records, stored_record
from db.models.visitor_record import VisitorRecord, VisitorSource
from db.storage import Storage


def _row_count(storage: Storage) -> int:
    with storage.session_scope() as db:
        return db.execute(select(func.count()).select_from(VisitorRecord)).scalar_one()


class TestUpsert:
    def test_same_key_keeps_one_row_with_second_value(self, storage: Storage) -> None:
        seed_records(storage, [make_observation(visitors=500_000)])
        seed_records(storage, [make_observation(visitors=650_000)])

        assert _row_count(storage) == 1
        row = stored_record(storage)
        assert row is not None
        assert row.visitors == 650_000

    def test_upsert_replaces_source_and_official(self, storage: Storage) -> None:
        seed_records(storage, [make_observation(source=VisitorSource.PRIMARY, official=True)])
        seed_records(
            storage,
            [make_observation(source=VisitorSource.EXTERNAL, official=False, visitors=42_000)],
        )

        row = stored_record(storage)
        assert row is not None
        assert row.source == VisitorSource.EXTERNAL
        assert row.official is False
        assert row.visitors == 42_000

    def test_different_countries_are_distinct_rows(self, storage: Storage) -> None:
        seed_records(
            storage,
            [make_observation(country="South Korea"), make_observation(country="China")],
        )
        assert _row_count(storage) == 2

    def test_unknown_source_is_rejected(self, storage: Storage) -> None:
        with storage.session_scope() as db:
            with pytest.raises(ValueError):
                VisitorRecordRepository(db).upsert_record(make_observation(source="scraped"))


class TestAggregations:
    ROWS = [
        (2019, 1, "South Korea", 465_000),
        (2019, 2, "South Korea", 470_000),
        (2019, 1, "China", 754_000),
        (2020, 1, "South Korea", 321_000),
        (2020, 4, "China", 100),
        (2020, 4, "South Korea", 500),
        (2021, 12, "Taiwan", 1_200),
    ]

    @pytest.fixture()
    def seeded(self, storage: Storage) -> Storage:
        seed_records(
            storage,
            [
                make_observation(year=year, month=month, country=country, visitors=visitors)
                for year, month, country, visitors in self.ROWS
            ],
        )
        return storage

    def test_yearly_totals_equal_sum_of_monthly_rows(self, seeded: Storage) -> None:
        expected: dict[tuple[int, str], int] = defaultdict(int)
        for year, _, country, visitors in self.ROWS:
            expected[(year, country)] += visitors

        with seeded.session_scope() as db:
            totals = VisitorRecordRepository(db).yearly_totals()

        assert {(t.year, t.country): t.visitors for t in totals} == dict(expected)
        assert [(t.year, t.country) for t in totals] == sorted(expected)

    def test_yearly_totals_can_be_restricted_to_years(self, seeded: Storage) -> None:
        with seeded.session_scope() as db:
            totals = VisitorRecordRepository(db).yearly_totals(years=[2021])
        assert [(t.year, t.country, t.visitors) for t in totals] == [(2021, "Taiwan", 1_200)]

    def test_monthly_totals_are_scoped_to_year(self, seeded: Storage) -> None:
        with seeded.session_scope() as db:
            totals = VisitorRecordRepository(db).monthly_totals(year=2020)
        assert [(t.month, t.country, t.visitors) for t in totals] == [
            (1, "South Korea", 321_000),
            (4, "China", 100),
            (4, "South Korea", 500),
        ]

    def test_list_countries_is_distinct(self, seeded: Storage) -> None:
        with seeded.session_scope() as db:
            assert VisitorRecordRepository(db).list_countries() == {"South Korea", "China", "Taiwan"}

    def test_month_total_sums_all_countries(self, seeded: Storage) -> None:
        with seeded.session_scope() as db:
            assert VisitorRecordRepository(db).month_total(year=2019, month=1) == 1_219_000

    def test_month_total_absent_month_is_zero(self, seeded: Storage) -> None:
        with seeded.session_scope() as db:
            assert VisitorRecordRepository(db).month_total(year=2030, month=6) == 0

    def test_country_totals_for_month_ordered_by_country(self, seeded: Storage) -> None:
        with seeded.session_scope() as db:
            totals = VisitorRecordRepository(db).country_totals_for_month(year=2020, month=4)
        assert list(totals.items()) == [("China", 100), ("South Korea", 500)]
