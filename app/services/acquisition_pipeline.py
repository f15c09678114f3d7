"""
app/services/acquisition_pipeline.py

Ordered fallback across acquisition tiers.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.domain.visitor_arrivals import AcquisitionResult, DataSourceDescriptor

logger = logging.getLogger(__name__)


class AcquisitionPipeline:
    """
    Tries each tier in order and returns the first non-empty result.

    Tiers run sequentially; only the winning tier's output is used. Every
    tier failure is logged and the next tier is tried, so ``acquire`` never
    raises.
    """

    def __init__(self, connectors: Sequence[BaseConnector]) -> None:
        self._connectors = list(connectors)

    def describe_sources(self) -> list[DataSourceDescriptor]:
        return [connector.describe() for connector in self._connectors]

    def acquire(self) -> AcquisitionResult:
        for connector in self._connectors:
            if not connector.enabled:
                logger.debug("Acquisition tier disabled connector=%s", connector.name)
                continue

            logger.info(
                "Acquisition tier starting connector=%s source=%s",
                connector.name,
                connector.source,
            )
            try:
                fetched = connector.fetch_records()
            except ConnectorRequestError as exc:
                logger.error(
                    "Acquisition tier request failed connector=%s error=%s",
                    connector.name,
                    exc,
                )
                continue
            except Exception as exc:
                logger.exception(
                    "Unhandled acquisition tier failure connector=%s error=%s",
                    connector.name,
                    exc,
                )
                continue

            if not fetched.records:
                logger.warning(
                    "Acquisition tier returned no records connector=%s failed_records=%s",
                    connector.name,
                    fetched.failed_records,
                )
                continue

            records = tuple(record.with_provenance(connector.source) for record in fetched.records)
            logger.info(
                "Acquisition tier succeeded connector=%s source=%s records=%s failed_records=%s",
                connector.name,
                connector.source,
                len(records),
                fetched.failed_records,
            )
            return AcquisitionResult(source=connector.source, records=records)

        logger.warning("All acquisition tiers returned no data")
        return AcquisitionResult(source=None)
