"""
app/api/dependencies.py

Shared FastAPI dependencies for the arrivals routers.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.runtime import ArrivalsRuntime


def get_runtime(request: Request) -> ArrivalsRuntime:
    """
    Return the service runtime built during application startup.
    """

    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is still starting up.",
        )
    return runtime
