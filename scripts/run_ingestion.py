"""
Run one arrivals ingestion cycle (or a stats-only refresh) from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.runtime import build_runtime
from db.storage import Storage, StorageInitializationError


def main() -> int:
    parser = argparse.ArgumentParser(description="Run visitor arrivals ingestion.")
    parser.add_argument(
        "--stats-only",
        action="store_true",
        help="Recompute the stats snapshot without acquiring new data.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        storage = Storage.from_environment()
    except StorageInitializationError as exc:
        logging.getLogger(__name__).critical("Storage initialization failed: %s", exc)
        return 1

    try:
        runtime = build_runtime(storage)
        if args.stats_only:
            payload: dict[str, object] = {"stats_refreshed": runtime.stats_service.recompute_stats()}
        else:
            result = runtime.coordinator.run_ingestion_cycle()
            payload = {
                "updated": result.updated,
                "errors": result.errors,
                "source": result.source,
                "skipped_reason": result.skipped_reason,
                "stats_refreshed": result.stats_refreshed,
            }
    finally:
        storage.dispose()

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
