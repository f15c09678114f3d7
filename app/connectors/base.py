"""
app/connectors/base.py

Acquisition tier abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import requests

from app.config import ExternalHTTPSettings
from app.domain.visitor_arrivals import DataSourceDescriptor, VisitorObservation

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class ConnectorRequestError(RuntimeError):
    """
    Raised when a connector cannot reach its upstream after retries.
    """


@dataclass(frozen=True)
class ConnectorFetchResult:
    """
    Records produced by one tier attempt.
    """

    source: str
    records: list[VisitorObservation]
    failed_records: int = 0


class BaseConnector(ABC):
    """
    One acquisition tier.

    ``source`` is the provenance tag stamped on every record the tier
    produces; ``name`` identifies the concrete upstream in logs.
    """

    source: str
    name: str
    official: bool = True
    description: str = ""

    def __init__(
        self,
        *,
        source: str,
        name: str,
        http_settings: ExternalHTTPSettings,
        enabled: bool = True,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self.name = name
        self.enabled = enabled
        self._session = session or requests.Session()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier
        self._min_request_interval_seconds = (
            1.0 / http_settings.rate_limit_per_second if http_settings.rate_limit_per_second > 0 else 0.0
        )
        self._last_request_monotonic: float = 0.0

    @abstractmethod
    def fetch_records(self) -> ConnectorFetchResult:
        """
        Produce the trailing-window records for this tier, or an empty result.
        """

    def describe(self) -> DataSourceDescriptor:
        return DataSourceDescriptor(
            name=self.name,
            source=self.source,
            official=self.official,
            enabled=self.enabled,
            description=self.description,
            endpoints=self.endpoints(),
        )

    def endpoints(self) -> tuple[str, ...]:
        return ()

    def now(self) -> datetime:
        return self._clock()

    def _empty(self) -> ConnectorFetchResult:
        return ConnectorFetchResult(source=self.source, records=[], failed_records=0)

    def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        response = self._get(url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(f"{self.name}: {url} did not return JSON.") from exc

    def _get_text(self, url: str, *, params: dict[str, Any] | None = None) -> str:
        return self._get(url, params=params).text

    def _get(self, url: str, *, params: dict[str, Any] | None = None) -> requests.Response:
        """
        GET ``url`` from this tier's upstream.

        Throttled to the configured request rate. Timeouts, dropped
        connections, 429 and 5xx answers are retried with exponential
        backoff; any other 4xx fails the tier at once.
        """

        attempts = self._max_retries + 1
        failure = ""
        for attempt in range(1, attempts + 1):
            self._throttle()
            try:
                response = self._session.get(url, params=params, timeout=self._timeout_seconds)
            except (requests.Timeout, requests.ConnectionError) as exc:
                failure = f"{type(exc).__name__}: {exc}"
            else:
                status = response.status_code
                if status < 400:
                    return response
                if status not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Upstream rejected request connector=%s status=%s url=%s",
                        self.name,
                        status,
                        url,
                    )
                    raise ConnectorRequestError(f"{self.name}: upstream answered HTTP {status}.")
                failure = f"HTTP {status}"

            if attempt == attempts:
                break
            wait_seconds = self._backoff_initial_seconds * self._backoff_multiplier ** (attempt - 1)
            logger.warning(
                "Upstream unavailable, retrying connector=%s attempt=%s/%s wait_seconds=%.2f failure=%s",
                self.name,
                attempt,
                attempts,
                wait_seconds,
                failure,
            )
            time.sleep(wait_seconds)

        logger.error(
            "Upstream unavailable after retries connector=%s attempts=%s url=%s failure=%s",
            self.name,
            attempts,
            url,
            failure,
        )
        raise ConnectorRequestError(
            f"{self.name}: upstream unavailable after {attempts} attempt(s) ({failure})."
        )

    def _throttle(self) -> None:
        if self._min_request_interval_seconds <= 0:
            return
        wait_seconds = self._min_request_interval_seconds - (time.monotonic() - self._last_request_monotonic)
        if wait_seconds > 0:
            time.sleep(wait_seconds)
        self._last_request_monotonic = time.monotonic()
