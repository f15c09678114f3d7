from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import DEFAULT_COUNTRY_ALLOW_LIST, get_scheduler_settings
from db.storage import Storage


def _validate_env() -> None:
    """
    Check the arrivals environment before anything connects.

    Every problem found is listed in a single RuntimeError.
    """

    from db.config import DATABASE_URL_VARIABLES, configured_database_urls, load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    if not configured_database_urls():
        errors.append(f"No database URL configured. Set one of {', '.join(DATABASE_URL_VARIABLES)}.")

    # --- Target countries -----------------------------------------------
    allow_raw = os.getenv("COUNTRY_ALLOW_LIST", "").strip()
    allow_list = {c.strip() for c in allow_raw.split(",") if c.strip()} or set(DEFAULT_COUNTRY_ALLOW_LIST)
    targets_raw = os.getenv("TARGET_COUNTRIES", "").strip()
    if targets_raw:
        unknown = sorted({c.strip() for c in targets_raw.split(",") if c.strip()} - allow_list)
        if unknown:
            errors.append(
                f"TARGET_COUNTRIES contains countries outside the allow-list: {', '.join(unknown)}."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_schema(storage: Storage) -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate; a missing table aborts startup.
    """

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base

    missing = storage.missing_tables(set(Base.metadata.tables.keys()))
    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Create the storage handle and services, start the scheduler on boot,
    and tear both down on exit.

    An unreachable database at boot is tolerated; the scheduled jobs and the
    stats retry loop wait for it. A configuration error is fatal.
    """

    from app.runtime import build_runtime
    from app.scheduler.jobs import build_scheduler

    log = logging.getLogger(__name__)
    storage = Storage.from_environment()

    # Blocking DB round-trips run off the event loop.
    ready = await asyncio.to_thread(
        storage.wait_until_ready,
        max_wait_seconds=5.0,
        poll_interval_seconds=1.0,
    )
    if ready:
        log.info("Database connectivity confirmed")
        await asyncio.to_thread(_check_schema, storage)
        log.info("Database schema validated")
    else:
        log.warning("Database not reachable yet; scheduled jobs will retry")

    runtime = build_runtime(storage)
    application.state.runtime = runtime

    scheduler_settings = get_scheduler_settings()
    scheduler = None
    if scheduler_settings.enabled:
        scheduler = build_scheduler(
            coordinator=runtime.coordinator,
            stats_service=runtime.stats_service,
            settings=scheduler_settings,
        )
        scheduler.start()
        log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=True)
            log.info("Scheduler shut down")
        storage.dispose()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Visitor Arrivals API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import tourism_data_router

    application.include_router(tourism_data_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
