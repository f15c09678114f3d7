"""
app/runtime.py

Wiring of the arrivals services around one explicit storage handle.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from app.config import (
    get_acquisition_settings,
    get_covid_impact_settings,
    get_external_http_settings,
    get_ingestion_settings,
    get_stats_settings,
)
from app.connectors import (
    BaseConnector,
    ExternalProviderConnector,
    JNTOStatisticsConnector,
    JNTOWebConnector,
    VisitorEstimator,
)
from app.services.acquisition_pipeline import AcquisitionPipeline
from app.services.ingestion_coordinator import IngestionCoordinator
from app.services.stats_service import StatsService
from app.services.visitor_query_service import VisitorQueryService
from db.storage import Storage


@dataclass(frozen=True)
class ArrivalsRuntime:
    storage: Storage
    pipeline: AcquisitionPipeline
    stats_service: StatsService
    coordinator: IngestionCoordinator
    query_service: VisitorQueryService


def build_default_connectors() -> list[BaseConnector]:
    """
    Tiers in fallback order: JNTO API, JNTO website, external provider.
    """

    settings = get_acquisition_settings()
    http_settings = get_external_http_settings()
    estimator = VisitorEstimator(rng=random.Random(settings.random_seed))
    return [
        JNTOStatisticsConnector(settings=settings, http_settings=http_settings, estimator=estimator),
        JNTOWebConnector(settings=settings, http_settings=http_settings, estimator=estimator),
        ExternalProviderConnector(settings=settings, http_settings=http_settings, estimator=estimator),
    ]


def build_runtime(
    storage: Storage,
    *,
    connectors: list[BaseConnector] | None = None,
) -> ArrivalsRuntime:
    pipeline = AcquisitionPipeline(connectors if connectors is not None else build_default_connectors())
    stats_service = StatsService(storage=storage, settings=get_stats_settings())
    coordinator = IngestionCoordinator(
        storage=storage,
        pipeline=pipeline,
        stats_service=stats_service,
        settings=get_ingestion_settings(),
        country_allow_list=get_acquisition_settings().country_allow_list,
    )
    query_service = VisitorQueryService(
        storage=storage,
        covid_settings=get_covid_impact_settings(),
        pipeline=pipeline,
    )
    return ArrivalsRuntime(
        storage=storage,
        pipeline=pipeline,
        stats_service=stats_service,
        coordinator=coordinator,
        query_service=query_service,
    )
