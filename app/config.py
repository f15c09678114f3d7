"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_TARGET_COUNTRIES: tuple[str, ...] = (
    "South Korea",
    "China",
    "Taiwan",
    "Hong Kong",
    "USA",
    "Thailand",
)

DEFAULT_COUNTRY_ALLOW_LIST: tuple[str, ...] = DEFAULT_TARGET_COUNTRIES + (
    "Singapore",
    "Australia",
    "United Kingdom",
    "Canada",
)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_int_env(name: str) -> int | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _get_csv_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list, dropping blanks and duplicates in order.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items: list[str] = []
    for token in raw_value.split(","):
        token = token.strip()
        if token and token not in items:
            items.append(token)
    return tuple(items) if items else default


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for acquisition connectors.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class AcquisitionSettings:
    """
    Tier endpoints, target countries and estimate model settings.
    """

    target_countries: tuple[str, ...] = DEFAULT_TARGET_COUNTRIES
    country_allow_list: tuple[str, ...] = DEFAULT_COUNTRY_ALLOW_LIST
    primary_enabled: bool = True
    primary_base_url: str = "https://statistics.jnto.go.jp"
    primary_path: str = "/api/graph/visitor-arrivals-country"
    secondary_enabled: bool = True
    secondary_base_url: str = "https://statistics.jnto.go.jp"
    secondary_path: str = "/en/graph/"
    external_enabled: bool = True
    external_provider_name: str = "external_estimates"
    random_seed: int | None = None


@dataclass(frozen=True)
class StatsSettings:
    """
    Retry budget for snapshot recomputation.
    """

    max_attempts: int = 5
    readiness_wait_seconds: float = 30.0
    readiness_poll_seconds: float = 1.0
    backoff_base_seconds: float = 1.0


@dataclass(frozen=True)
class IngestionSettings:
    skip_overlapping: bool = False


@dataclass(frozen=True)
class CovidImpactSettings:
    baseline_year: int = 2019
    trough_years: tuple[int, ...] = (2020, 2021)
    recovery_year: int = 2025


@dataclass(frozen=True)
class SchedulerSettings:
    enabled: bool = True
    ingestion_interval_hours: float = 6.0
    startup_delay_seconds: float = 15.0
    stats_refresh_interval_minutes: float = 60.0
    misfire_grace_seconds: int = 900


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_acquisition_settings() -> AcquisitionSettings:
    """
    Return acquisition tier settings from environment variables.

    Target countries outside the allow-list are dropped.
    """

    allow_list = _get_csv_env("COUNTRY_ALLOW_LIST", DEFAULT_COUNTRY_ALLOW_LIST)
    targets = tuple(
        country
        for country in _get_csv_env("TARGET_COUNTRIES", DEFAULT_TARGET_COUNTRIES)
        if country in allow_list
    )
    return AcquisitionSettings(
        target_countries=targets or DEFAULT_TARGET_COUNTRIES,
        country_allow_list=allow_list,
        primary_enabled=_get_bool_env("JNTO_API_ENABLED", True),
        primary_base_url=_get_str_env("JNTO_API_BASE_URL", "https://statistics.jnto.go.jp"),
        primary_path=_get_str_env("JNTO_API_PATH", "/api/graph/visitor-arrivals-country"),
        secondary_enabled=_get_bool_env("JNTO_WEB_ENABLED", True),
        secondary_base_url=_get_str_env("JNTO_WEB_BASE_URL", "https://statistics.jnto.go.jp"),
        secondary_path=_get_str_env("JNTO_WEB_PATH", "/en/graph/"),
        external_enabled=_get_bool_env("EXTERNAL_PROVIDER_ENABLED", True),
        external_provider_name=_get_str_env("EXTERNAL_PROVIDER_NAME", "external_estimates"),
        random_seed=_get_optional_int_env("ACQUISITION_RANDOM_SEED"),
    )


@lru_cache(maxsize=1)
def get_stats_settings() -> StatsSettings:
    return StatsSettings(
        max_attempts=max(1, _get_int_env("STATS_MAX_ATTEMPTS", 5)),
        readiness_wait_seconds=max(0.0, _get_float_env("STATS_READINESS_WAIT_SECONDS", 30.0)),
        readiness_poll_seconds=max(0.01, _get_float_env("STATS_READINESS_POLL_SECONDS", 1.0)),
        backoff_base_seconds=max(0.0, _get_float_env("STATS_BACKOFF_BASE_SECONDS", 1.0)),
    )


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    return IngestionSettings(
        skip_overlapping=_get_bool_env("INGESTION_SKIP_OVERLAPPING", False),
    )


@lru_cache(maxsize=1)
def get_covid_impact_settings() -> CovidImpactSettings:
    trough_raw = _get_csv_env("COVID_TROUGH_YEARS", ("2020", "2021"))
    trough_years: list[int] = []
    for token in trough_raw:
        try:
            trough_years.append(int(token))
        except ValueError:
            continue
    return CovidImpactSettings(
        baseline_year=_get_int_env("COVID_BASELINE_YEAR", 2019),
        trough_years=tuple(trough_years) or (2020, 2021),
        recovery_year=_get_int_env("COVID_RECOVERY_YEAR", 2025),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    return SchedulerSettings(
        enabled=_get_bool_env("SCHEDULER_ENABLED", True),
        ingestion_interval_hours=max(0.01, _get_float_env("INGESTION_INTERVAL_HOURS", 6.0)),
        startup_delay_seconds=max(0.0, _get_float_env("SCHEDULER_STARTUP_DELAY_SECONDS", 15.0)),
        stats_refresh_interval_minutes=max(
            1.0, _get_float_env("STATS_REFRESH_INTERVAL_MINUTES", 60.0)
        ),
        misfire_grace_seconds=max(1, _get_int_env("SCHEDULER_MISFIRE_GRACE_SECONDS", 900)),
    )
