"""Settings and logging configuration for GP Researcher.

Settings are read from a local .env file (if present) and the process
environment. Supported variables:

    GP_DATABASE          DuckDB file holding the source tables.
    GP_POSTGRES_DSN      PostgreSQL connection string, used instead of GP_DATABASE.
    GP_SCHEMA            Alias the source database is attached under (default "gp").
    GP_SHOW_FIGURES      Open figures in the browser (default true).
    GP_FIGURE_DIR        Also write every figure as HTML into this directory.
    GP_BOUNDARY_GEOJSON  Local authority boundaries for the county map.
    GP_POSTCODE_MATCH    "substring" or "outward" postcode prefix matching.
    LOG_LEVEL            Standard logging level name (default WARNING).
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Final, NamedTuple

from dotenv import load_dotenv

from GP_researcher.errors import ConfigurationError

DEFAULT_DATABASE: Final = Path("./gp_practice_data.duckdb")
DEFAULT_SCHEMA: Final = "gp"
POSTCODE_MATCH_MODES: Final = ("substring", "outward")
LOG_FORMAT: Final = "%(asctime)s - %(levelname)s - %(message)s"


class Settings(NamedTuple):
    database: Path | None
    postgres_dsn: str | None
    schema: str
    show_figures: bool
    figure_dir: Path | None
    boundary_geojson: Path | None
    postcode_match: str
    log_level: str


def _env_flag(name: str, default: bool) -> bool:
    raw: str = os.getenv(name, "")
    if not raw:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_path(name: str) -> Path | None:
    raw: str = os.getenv(name, "")
    return Path(raw).expanduser().resolve() if raw else None


def load_settings() -> Settings:
    """
    Build the Settings from .env and the environment.

    GP_POSTGRES_DSN wins over GP_DATABASE. When neither is set the default
    DuckDB file in the working directory is used.
    """
    load_dotenv()

    postgres_dsn: str | None = os.getenv("GP_POSTGRES_DSN") or None
    database: Path | None = None
    if not postgres_dsn:
        database = _env_path("GP_DATABASE") or DEFAULT_DATABASE.resolve()

    postcode_match: str = os.getenv("GP_POSTCODE_MATCH", "substring").strip().lower()
    if postcode_match not in POSTCODE_MATCH_MODES:
        raise ConfigurationError(
            f"GP_POSTCODE_MATCH must be one of {POSTCODE_MATCH_MODES}, got {postcode_match!r}"
        )

    log_level: str = os.getenv("LOG_LEVEL", "WARNING").strip().upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ConfigurationError(f"Unknown LOG_LEVEL {log_level!r}")

    return Settings(
        database=database,
        postgres_dsn=postgres_dsn,
        schema=os.getenv("GP_SCHEMA", DEFAULT_SCHEMA) or DEFAULT_SCHEMA,
        show_figures=_env_flag("GP_SHOW_FIGURES", True),
        figure_dir=_env_path("GP_FIGURE_DIR"),
        boundary_geojson=_env_path("GP_BOUNDARY_GEOJSON"),
        postcode_match=postcode_match,
        log_level=log_level,
    )


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Configure the package logger to write to stderr."""
    logger = logging.getLogger("GP_researcher")
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
