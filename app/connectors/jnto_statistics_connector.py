"""
app/connectors/jnto_statistics_connector.py

Primary tier: the JNTO statistics country-breakdown endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import requests

from app.config import AcquisitionSettings, ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult
from app.connectors.country_names import normalize_country
from app.connectors.visitor_estimates import VisitorEstimator
from app.domain.visitor_arrivals import VisitorObservation
from db.models.visitor_record import VisitorSource

logger = logging.getLogger(__name__)


class JNTOStatisticsConnector(BaseConnector):
    """
    Fetches the country breakdown from the JNTO statistics API.

    Every (country, month) cell of the trailing window is filled: published
    figures from the payload take precedence, the remaining cells come from
    the arrivals model so the tier always yields the full grid.
    """

    official = True
    description = "JNTO statistics API, monthly arrivals by country"

    def __init__(
        self,
        *,
        settings: AcquisitionSettings,
        http_settings: ExternalHTTPSettings,
        estimator: VisitorEstimator | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(
            source=VisitorSource.PRIMARY,
            name="jnto_api",
            http_settings=http_settings,
            enabled=settings.primary_enabled,
            session=session,
            clock=clock,
        )
        self._settings = settings
        self._estimator = estimator or VisitorEstimator()
        self._url = f"{settings.primary_base_url.rstrip('/')}/{settings.primary_path.lstrip('/')}"

    def endpoints(self) -> tuple[str, ...]:
        return (self._url,)

    def fetch_records(self) -> ConnectorFetchResult:
        if not self.enabled:
            return self._empty()

        payload = self._get_json(self._url, params={"lang": "en"})
        rows = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            logger.error("Unexpected JNTO API payload shape connector=%s", self.name)
            return ConnectorFetchResult(source=self.source, records=[], failed_records=1)

        now = self.now()
        grid = self._estimator.trailing_window(
            countries=self._settings.target_countries,
            end=now,
            source=self.source,
        )
        published, failed = self._published_values(rows)
        records = [
            VisitorObservation(
                year=cell.year,
                month=cell.month,
                country=cell.country,
                visitors=published[cell.key],
                source=cell.source,
                observed_at=cell.observed_at,
            )
            if cell.key in published
            else cell
            for cell in grid
        ]
        logger.info(
            "JNTO API fetched connector=%s records=%s published=%s failed_rows=%s",
            self.name,
            len(records),
            sum(1 for cell in grid if cell.key in published),
            failed,
        )
        return ConnectorFetchResult(source=self.source, records=records, failed_records=failed)

    def _published_values(self, rows: list[Any]) -> tuple[dict[tuple[int, int, str], int], int]:
        published: dict[tuple[int, int, str], int] = {}
        failed = 0
        for index, row in enumerate(rows):
            try:
                normalized = self._normalize_row(row)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Failed to normalize JNTO row index=%s error=%s", index, exc)
                failed += 1
                continue
            if normalized is None:
                failed += 1
                continue
            key, visitors = normalized
            published[key] = visitors
        return published, failed

    def _normalize_row(self, row: Any) -> tuple[tuple[int, int, str], int] | None:
        if not isinstance(row, dict):
            return None

        country = normalize_country(row.get("country"), self._settings.country_allow_list)
        if country is None:
            return None
        year = int(row["year"])
        month = int(row["month"])
        visitors = int(row["visitors"])
        if not 1 <= month <= 12 or visitors < 0:
            return None
        return (year, month, country), visitors
