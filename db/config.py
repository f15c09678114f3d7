"""
db/config.py

Where the arrivals service finds its PostgreSQL URL.

The URL is read from the process environment, optionally seeded from
`.env` and `.env.local` at the project root. A managed deployment sets
CLOUD_DATABASE_URL together with a cloud ENVIRONMENT; a developer machine
sets LOCAL_DATABASE_URL. DATABASE_URL overrides both.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILENAMES = (".env", ".env.local")
DATABASE_URL_VARIABLES = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")

_CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})
_PSYCOPG_SCHEME = "postgresql+psycopg://"


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.removeprefix("export ").strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path = PROJECT_ROOT) -> None:
    """
    Seed the environment from `.env` files under ``root``.

    Variables already set in the process are left alone, and `.env` is
    read before `.env.local`, so the first definition of a key wins.
    """

    for filename in ENV_FILENAMES:
        env_path = root / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None and parsed[0] not in os.environ:
                os.environ[parsed[0]] = parsed[1]


def normalize_postgres_url(url: str) -> str:
    """Pin bare ``postgres://`` / ``postgresql://`` URLs to the psycopg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return _PSYCOPG_SCHEME + url[len(prefix) :]
    return url


def configured_database_urls() -> dict[str, str]:
    """Non-blank database URL variables, keyed by variable name."""
    urls: dict[str, str] = {}
    for name in DATABASE_URL_VARIABLES:
        value = os.getenv(name, "").strip()
        if value:
            urls[name] = value
    return urls


def resolve_database_url() -> str:
    """
    Return the URL the arrivals store should connect to.

    DATABASE_URL always wins. CLOUD_DATABASE_URL only counts when
    ENVIRONMENT names a cloud deployment; LOCAL_DATABASE_URL is the
    fallback.
    """

    load_env_files()
    urls = configured_database_urls()
    environment = os.getenv("ENVIRONMENT", "local").strip().lower()

    order = ["DATABASE_URL"]
    if environment in _CLOUD_ENVIRONMENTS:
        order.append("CLOUD_DATABASE_URL")
    order.append("LOCAL_DATABASE_URL")

    for name in order:
        if name in urls:
            return normalize_postgres_url(urls[name])

    raise RuntimeError(
        "No database URL configured for visitor arrivals. Set DATABASE_URL, "
        "or LOCAL_DATABASE_URL (CLOUD_DATABASE_URL with a cloud ENVIRONMENT)."
    )
