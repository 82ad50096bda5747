from pathlib import Path

import duckdb
import pytest

from GP_researcher.config import Settings
from GP_researcher.db_connection import DatabaseConnection
from GP_researcher.researcher import Session

METFORMIN = ("0601022B0AAABAB", "Metformin HCl_Tab 500mg")
GLICLAZIDE = ("0601021M0AAAAAA", "Gliclazide_Tab 80mg")
BISOPROLOL = ("0204000H0AAAAAA", "Bisoprolol Fumar_Tab 5mg")
PROPRANOLOL = ("0204000R0AAAHAH", "Propranolol HCl_Tab 10mg")

ADDRESSES = [
    ("W001", "ST. LUKE'S SURGERY", "NP11 5GX", "Gwent", "YSTRAD MYNACH"),
    ("W002", "BARRY HEALTH CENTRE", "CF62 8XX", "South Glamorgan", "BARRY"),
    ("W003", "UNMAPPED SURGERY", "CF14 1AB", "Unknown County", "UNRECOGNISED TOWN"),
    ("W004", "HILL STREET SURGERY", "NP11 6AA", "Gwent", "NEWBRIDGE"),
    ("W005", "MARINA SURGERY", "SA1 1AA", "West Glamorgan", "SWANSEA"),
    ("W006", "CASTLE SURGERY", "SA1 1AA", "West Glamorgan", "SWANSEA"),
]

# (practice, drug, items, actcost, quantity)
PRESCRIPTIONS = [
    ("W001", METFORMIN, 40, 80.0, 400.0),
    ("W001", GLICLAZIDE, 10, 20.0, 100.0),
    ("W001", BISOPROLOL, 30, 60.0, 300.0),
    ("W001", PROPRANOLOL, 5, 25.0, 50.0),
    ("W001", METFORMIN, 20, 40.0, 200.0),
    ("W002", METFORMIN, 15, 30.0, 150.0),
    ("W002", BISOPROLOL, 10, 40.0, 100.0),
    ("W002", PROPRANOLOL, 4, 8.0, 40.0),
    ("W003", BISOPROLOL, 2, 6.0, 20.0),
    ("W004", METFORMIN, 25, 50.0, 250.0),
    ("W004", GLICLAZIDE, 12, 24.0, 120.0),
    ("W004", BISOPROLOL, 20, 30.0, 200.0),
    ("W004", PROPRANOLOL, 6, 12.0, 60.0),
    ("W005", METFORMIN, 5, 10.0, 50.0),
    ("W005", BISOPROLOL, 8, 16.0, 80.0),
    ("W006", METFORMIN, 60, 120.0, 600.0),
    ("W006", GLICLAZIDE, 20, 40.0, 200.0),
    ("W006", BISOPROLOL, 35, 70.0, 350.0),
    ("W006", PROPRANOLOL, 10, 50.0, 100.0),
    ("W006", METFORMIN, 10, 20.0, 100.0),
    ("W006", GLICLAZIDE, 5, 10.0, 50.0),
]

# practice -> (HYP001 ratio, OB001W ratio, CHD001 centile)
ACHIEVEMENT = {
    "W001": (0.15, 0.10, 0.80),
    "W002": (0.12, 0.08, 0.40),
    "W003": (0.10, 0.12, 0.20),
    "W004": (0.16, 0.11, 0.70),
    "W005": (0.11, 0.09, 0.30),
    "W006": (0.18, 0.13, 0.90),
}

BNF = [
    ("0601022B0", "Metformin hydrochloride", "601", "Drugs used in diabetes"),
    ("0601021M0", "Gliclazide", "601", "Drugs used in diabetes"),
    ("0601023AG", "Metformin hydrochloride/sitagliptin", "601", "Drugs used in diabetes"),
    ("0601060D0", "Glucose blood testing reagents", "601", "Drugs used in diabetes"),
    ("0204000H0", "Bisoprolol fumarate", "204", "Beta-adrenoceptor blocking drugs"),
    ("0204000R0", "Propranolol hydrochloride", "204", "Beta-adrenoceptor blocking drugs"),
]


def build_database(path: Path) -> None:
    conn = duckdb.connect(str(path))
    conn.execute(
        "CREATE TABLE address (practiceid VARCHAR, street VARCHAR, postcode VARCHAR, "
        "county VARCHAR, posttown VARCHAR)"
    )
    conn.execute(
        "CREATE TABLE gp_data_up_to_2015 (practiceid VARCHAR, bnfcode VARCHAR, bnfname VARCHAR, "
        "items INTEGER, actcost DOUBLE, quantity DOUBLE, period INTEGER)"
    )
    conn.execute(
        "CREATE TABLE qof_achievement (orgcode VARCHAR, indicator VARCHAR, ratio DOUBLE, "
        "centile DOUBLE)"
    )
    conn.execute(
        "CREATE TABLE bnf (bnfchemical VARCHAR, chemicaldesc VARCHAR, bnfsection VARCHAR, "
        "sectiondesc VARCHAR)"
    )

    conn.executemany("INSERT INTO address VALUES (?, ?, ?, ?, ?)", ADDRESSES)
    conn.executemany(
        "INSERT INTO gp_data_up_to_2015 VALUES (?, ?, ?, ?, ?, ?, ?)",
        [
            (practice, code, name, items, cost, quantity, 201501 + i % 3)
            for i, (practice, (code, name), items, cost, quantity) in enumerate(PRESCRIPTIONS)
        ],
    )
    achievement = []
    for practice, (hyp, ob, chd) in ACHIEVEMENT.items():
        achievement.append((practice, "HYP001", hyp, None))
        achievement.append((practice, "OB001W", ob, None))
        achievement.append((practice, "CHD001", 0.03, chd))
    conn.executemany("INSERT INTO qof_achievement VALUES (?, ?, ?, ?)", achievement)
    conn.executemany("INSERT INTO bnf VALUES (?, ?, ?, ?)", BNF)
    conn.close()


@pytest.fixture(scope="session")
def database_path(tmp_path_factory) -> Path:
    path = tmp_path_factory.mktemp("data") / "gp_practice_data.duckdb"
    build_database(path)
    return path


@pytest.fixture(scope="session")
def db(database_path):
    connection = DatabaseConnection(database_path)
    yield connection
    connection.cleanup()


@pytest.fixture
def settings(database_path) -> Settings:
    return Settings(
        database=database_path,
        postgres_dsn=None,
        schema="gp",
        show_figures=False,
        figure_dir=None,
        boundary_geojson=None,
        postcode_match="substring",
        log_level="WARNING",
    )


@pytest.fixture
def session(db, settings) -> Session:
    return Session(db, settings)


@pytest.fixture
def tables(session):
    return session.tables


@pytest.fixture
def scripted_input(monkeypatch):
    """Feed a fixed sequence of answers to input(); EOF once they run out."""

    def feed(*answers: str) -> None:
        remaining = iter(answers)

        def fake_input(prompt: str = "") -> str:
            try:
                return next(remaining)
            except StopIteration:
                raise EOFError from None

        monkeypatch.setattr("builtins.input", fake_input)

    return feed
