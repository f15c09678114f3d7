"""
app/connectors/external_provider_connector.py

Tertiary tier: third-party estimates, never marked official.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from app.config import AcquisitionSettings, ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult
from app.connectors.visitor_estimates import VisitorEstimator
from db.models.visitor_record import VisitorSource


class ExternalProviderConnector(BaseConnector):
    official = False
    description = "Third-party arrivals estimates"

    def __init__(
        self,
        *,
        settings: AcquisitionSettings,
        http_settings: ExternalHTTPSettings,
        estimator: VisitorEstimator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(
            source=VisitorSource.EXTERNAL,
            name=settings.external_provider_name,
            http_settings=http_settings,
            enabled=settings.external_enabled,
            clock=clock,
        )
        self._settings = settings
        self._estimator = estimator or VisitorEstimator()

    def fetch_records(self) -> ConnectorFetchResult:
        if not self.enabled:
            return self._empty()

        records = self._estimator.trailing_window(
            countries=self._settings.target_countries,
            end=self.now(),
            source=self.source,
            official=False,
        )
        return ConnectorFetchResult(source=self.source, records=records)
