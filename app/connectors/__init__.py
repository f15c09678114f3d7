"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorFetchResult, ConnectorRequestError
from app.connectors.external_provider_connector import ExternalProviderConnector
from app.connectors.jnto_statistics_connector import JNTOStatisticsConnector
from app.connectors.jnto_web_connector import JNTOWebConnector
from app.connectors.visitor_estimates import VisitorEstimator

__all__ = [
    "BaseConnector",
    "ConnectorFetchResult",
    "ConnectorRequestError",
    "ExternalProviderConnector",
    "JNTOStatisticsConnector",
    "JNTOWebConnector",
    "VisitorEstimator",
]
