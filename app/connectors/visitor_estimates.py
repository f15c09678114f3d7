"""
app/connectors/visitor_estimates.py

Arrivals model used by every acquisition tier to shape the trailing window.

Values are ``base(country) x seasonal(month) x year_factor(year) x jitter``,
rounded and floored at ``MIN_MONTHLY_VISITORS``. Jitter is uniform in
``[1 - JITTER, 1 + JITTER]``. Base counts reflect 2025 recovery levels.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import datetime

from app.domain.visitor_arrivals import VisitorObservation, trailing_months

MIN_MONTHLY_VISITORS = 1000
DEFAULT_BASE_VISITORS = 50_000
JITTER = 0.15
# Every tier reports exactly this many trailing months per country.
WINDOW_MONTHS = 12

BASE_MONTHLY_VISITORS: dict[str, int] = {
    "South Korea": 750_000,
    "China": 650_000,
    "Taiwan": 500_000,
    "Hong Kong": 200_000,
    "USA": 250_000,
    "Thailand": 95_000,
}

# Jan: post-holiday lull, Apr: cherry blossom, May: golden week,
# Jun: rainy season, Sep: typhoons, Oct-Nov: autumn colours.
SEASONAL_FACTORS: dict[int, float] = {
    1: 0.85,
    2: 0.80,
    3: 1.15,
    4: 1.25,
    5: 1.20,
    6: 0.90,
    7: 1.10,
    8: 1.15,
    9: 0.95,
    10: 1.20,
    11: 1.15,
    12: 1.05,
}

YEAR_FACTORS: dict[int, float] = {
    2023: 0.65,
    2024: 0.85,
    2025: 1.00,
}


class VisitorEstimator:
    """
    Generates one observation per (country, month) over a trailing window.
    """

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def estimate(self, country: str, year: int, month: int) -> int:
        base = BASE_MONTHLY_VISITORS.get(country, DEFAULT_BASE_VISITORS)
        seasonal = SEASONAL_FACTORS.get(month, 1.0)
        year_factor = YEAR_FACTORS.get(year, 1.0)
        jitter = self._rng.uniform(1.0 - JITTER, 1.0 + JITTER)
        return max(round(base * seasonal * year_factor * jitter), MIN_MONTHLY_VISITORS)

    def trailing_window(
        self,
        *,
        countries: Sequence[str],
        end: datetime,
        source: str,
        window_months: int = WINDOW_MONTHS,
        official: bool = True,
    ) -> list[VisitorObservation]:
        """
        Return ``window_months x len(countries)`` observations ending at the
        month of ``end``, oldest month first.
        """

        records: list[VisitorObservation] = []
        for year, month in trailing_months(end.year, end.month, window_months):
            for country in countries:
                records.append(
                    VisitorObservation(
                        year=year,
                        month=month,
                        country=country,
                        visitors=self.estimate(country, year, month),
                        source=source,
                        official=official,
                        observed_at=end,
                    )
                )
        return records
