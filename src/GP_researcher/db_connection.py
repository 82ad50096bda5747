"""Database connection management for GP Researcher."""

from __future__ import annotations

import atexit
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import duckdb
import polars as pl

from GP_researcher.config import Settings
from GP_researcher.errors import ConfigurationError

logger = logging.getLogger(__name__)

SOURCE_ALIAS = "gp"


class DatabaseConnection:
    """Manages the connection to the prescribing and QOF source database."""

    def __init__(
        self,
        db_path: Path | None = None,
        postgres_dsn: str | None = None,
        alias: str = SOURCE_ALIAS,
    ) -> None:
        """Attach the source database read-only to an in-memory DuckDB connection.

        Queries address the source tables as ``<alias>.<table>``.
        """
        if not alias.isidentifier():
            raise ConfigurationError(f"Invalid source schema name: {alias!r}")
        if db_path is None and not postgres_dsn:
            raise ConfigurationError("No source database configured")
        if db_path is not None and not postgres_dsn and not db_path.exists():
            raise ConfigurationError(f"Database file not found: {db_path}")

        self.conn: duckdb.DuckDBPyConnection | None = duckdb.connect(":memory:")

        if postgres_dsn:
            self.conn.execute("INSTALL postgres")
            self.conn.execute("LOAD postgres")
            dsn_sql = postgres_dsn.replace("'", "''")
            self.conn.execute(f"ATTACH '{dsn_sql}' AS {alias} (TYPE postgres, READ_ONLY)")
            logger.info("Attached PostgreSQL source database")
        else:
            path_sql = str(db_path).replace("'", "''")
            # Read-only to avoid locking the source file
            self.conn.execute(f"ATTACH DATABASE '{path_sql}' AS {alias} (READ_ONLY)")
            logger.info("Attached DuckDB source database %s", db_path)

        atexit.register(self.cleanup)

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseConnection:
        return cls(
            db_path=settings.database,
            postgres_dsn=settings.postgres_dsn,
            alias=settings.schema,
        )

    def query_df(self, sql: str, params: Sequence[Any] | None = None) -> pl.DataFrame:
        """Execute query and return results as a Polars DataFrame."""
        if self.conn is None:
            raise ValueError("Database connection is closed")

        logger.debug("Running query: %s | params=%s", " ".join(sql.split()), params)
        if params:
            return self.conn.execute(sql, list(params)).pl()
        return self.conn.execute(sql).pl()

    def cleanup(self) -> None:
        """Close database connection."""
        if hasattr(self, "conn") and self.conn is not None:
            self.conn.close()
            self.conn = None
