import duckdb
import pytest

from GP_researcher.analysis import data_queries as dq
from GP_researcher.db_connection import DatabaseConnection
from GP_researcher.errors import ConfigurationError
from GP_researcher.researcher import Session


@pytest.fixture
def small_db(tmp_path):
    path = tmp_path / "small.duckdb"
    conn = duckdb.connect(str(path))
    conn.execute("CREATE TABLE t (id INTEGER, name VARCHAR)")
    conn.execute("INSERT INTO t VALUES (1, 'a'), (2, 'b')")
    conn.close()
    return path


def test_query_df_returns_polars(small_db):
    db = DatabaseConnection(small_db)
    try:
        df = db.query_df("SELECT name FROM gp.t WHERE id = ?", [2])
        assert df["name"].to_list() == ["b"]
        assert db.query_df("SELECT COUNT(*) AS n FROM gp.t")["n"].item() == 2
    finally:
        db.cleanup()


def test_source_is_attached_read_only(small_db):
    db = DatabaseConnection(small_db)
    try:
        with pytest.raises(duckdb.Error):
            db.query_df("INSERT INTO gp.t VALUES (3, 'c')")
    finally:
        db.cleanup()


def test_missing_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        DatabaseConnection(tmp_path / "missing.duckdb")


def test_no_source_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        DatabaseConnection()


def test_closed_connection_rejects_queries(small_db):
    db = DatabaseConnection(small_db)
    db.cleanup()
    db.cleanup()
    with pytest.raises(ValueError):
        db.query_df("SELECT 1")


def test_source_attached_under_configured_schema(settings):
    db = DatabaseConnection.from_settings(settings._replace(schema="source"))
    try:
        session = Session(db, settings._replace(schema="source"))
        sizes = dict(dq.get_practice_sizes(db, session.tables).iter_rows())
        assert sizes == {"W001": 5, "W002": 3, "W003": 1, "W004": 4, "W005": 2, "W006": 6}
    finally:
        db.cleanup()


def test_invalid_schema_is_a_configuration_error(small_db):
    with pytest.raises(ConfigurationError):
        DatabaseConnection(small_db, alias="gp; DROP")
