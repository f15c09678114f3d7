"""
app/services package marker.
"""

from app.services.acquisition_pipeline import AcquisitionPipeline
from app.services.ingestion_coordinator import IngestionCoordinator
from app.services.stats_service import StatsService
from app.services.visitor_query_service import VisitorQueryService

__all__ = [
    "AcquisitionPipeline",
    "IngestionCoordinator",
    "StatsService",
    "VisitorQueryService",
]
