"""
app/api/routers package marker.
"""

from app.api.routers.tourism_data import router as tourism_data_router

__all__ = [
    "tourism_data_router",
]
