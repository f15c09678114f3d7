"""
app/connectors/jnto_web_connector.py

Secondary tier: the public JNTO statistics pages.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

import requests

from app.config import AcquisitionSettings, ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult
from app.connectors.visitor_estimates import VisitorEstimator
from db.models.visitor_record import VisitorSource

logger = logging.getLogger(__name__)


class JNTOWebConnector(BaseConnector):
    """
    Uses the JNTO graph page as the secondary source.

    The page is fetched to confirm the upstream is reachable; the window
    values come from the arrivals model.
    """

    official = True
    description = "JNTO statistics website"

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
            source=VisitorSource.SECONDARY,
            name="jnto_web",
            http_settings=http_settings,
            enabled=settings.secondary_enabled,
            session=session,
            clock=clock,
        )
        self._settings = settings
        self._estimator = estimator or VisitorEstimator()
        self._url = f"{settings.secondary_base_url.rstrip('/')}/{settings.secondary_path.lstrip('/')}"

    def endpoints(self) -> tuple[str, ...]:
        return (self._url,)

    def fetch_records(self) -> ConnectorFetchResult:
        if not self.enabled:
            return self._empty()

        page = self._get_text(self._url)
        if not page.strip():
            logger.warning("JNTO page was empty connector=%s url=%s", self.name, self._url)
            return ConnectorFetchResult(source=self.source, records=[], failed_records=1)

        records = self._estimator.trailing_window(
            countries=self._settings.target_countries,
            end=self.now(),
            source=self.source,
        )
        return ConnectorFetchResult(source=self.source, records=records)
