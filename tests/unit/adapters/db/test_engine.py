"""Unit tests for the database engine helpers.

These tests cover:
- Detection of SQLite vs. non-SQLite URLs.
- The Python implementation of SQLite's REGEXP operator.
- PRAGMAs and the ``regexp`` function applied on connect.
"""

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text
from sqlalchemy.engine import make_url

from streamstore.adapters.db.engine import is_sqlite, sqlite_regexp

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_is_sqlite_true_for_sqlite_url():
    assert is_sqlite("sqlite:///:memory:")
    assert is_sqlite(make_url("sqlite+pysqlite:///file.db"))


def test_is_sqlite_false_for_postgres_url():
    assert not is_sqlite("postgresql://u:p@localhost/db")
    assert not is_sqlite(make_url("postgresql+psycopg://u:p@localhost/db"))


@pytest.mark.parametrize(
    "pattern,value,expected",
    [
        ("^eu", "eu-west", True),
        ("^eu", "us-east", False),
        ("west$", "eu-west", True),
        ("^1[0-9]$", 12, True),
        ("x", None, False),
        (None, "x", False),
    ],
)
def test_sqlite_regexp(pattern, value, expected):
    """Search semantics; NULL never matches; non-text is matched as text."""
    assert sqlite_regexp(pattern, value) is expected


def test_sqlite_pragmas_applied(sqlite_engine_file: "Engine"):
    """SQLite engines created by make_engine() apply the expected PRAGMAs."""
    with sqlite_engine_file.connect() as cxn:
        fk = cxn.exec_driver_sql("PRAGMA foreign_keys;").scalar()
        jm = cxn.exec_driver_sql("PRAGMA journal_mode;").scalar()
        sync = cxn.exec_driver_sql("PRAGMA synchronous;").scalar()
    assert fk == 1
    assert jm is not None and jm.lower() == "wal"
    assert sync == 1


def test_regexp_function_registered(sqlite_engine_memory: "Engine"):
    """The REGEXP operator works on connections from make_engine()."""
    with sqlite_engine_memory.connect() as cxn:
        hit = cxn.execute(text("SELECT 'eu-west' REGEXP :p"), {"p": "^eu"}).scalar()
        miss = cxn.execute(text("SELECT 'us-east' REGEXP :p"), {"p": "^eu"}).scalar()
    assert hit == 1
    assert miss == 0
