"""sqlite-specific fixtures"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.engine import URL

from streamstore.adapters.db.engine import make_engine
from streamstore.adapters.eventstore import SqlAlchemyEventStore

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_engine_memory() -> Iterator[Engine]:
    """In-memory SQLite engine with the registry tables installed.

    Uses `make_engine()` so PRAGMAs and the ``regexp`` function are applied.
    SQLAlchemy keeps one connection per thread for ``:memory:`` databases, so
    every checkout sees the same database.

    Yields:
        Engine: SQLAlchemy engine bound to an in-memory DB.
    """
    test_engine = make_engine("sqlite+pysqlite:///:memory:")
    SqlAlchemyEventStore(test_engine).install()
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def sqlite_engine_file(tmp_path: Path) -> Iterator[Engine]:
    """File-backed SQLite engine with the registry tables installed (per test).

    Each test gets its own database file under its temp dir, so nothing is
    cleaned up between tests.

    Yields:
        Engine: SQLAlchemy engine pointing at a temp file DB.
    """
    url = str(URL.create("sqlite+pysqlite", database=str(tmp_path / "test.db")))
    test_engine = make_engine(url)
    SqlAlchemyEventStore(test_engine).install()
    try:
        yield test_engine
    finally:
        test_engine.dispose()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a fresh, empty SQLite database file."""
    return str(URL.create("sqlite+pysqlite", database=str(tmp_path / "cli.db")))
