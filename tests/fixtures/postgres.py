"""PostgreSQL related fixtures for STREAMSTORE.

PostgreSQL engines are backed by a temporary Postgres 17 instance launched with
Testcontainers. The registry tables are installed once per session; stream
tables and registry rows are removed after each test.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

import docker
import pytest
from sqlalchemy import inspect, text

from streamstore.adapters.db.engine import make_engine
from streamstore.adapters.eventstore import SqlAlchemyEventStore
from streamstore.adapters.eventstore.naming import is_physical_name, quote_identifier

try:
    from testcontainers.postgres import (
        PostgresContainer,  # pyright: ignore[reportMissingTypeStubs]
    )
except ImportError:  # pragma: no cover
    PostgresContainer = None  # pylint: disable=invalid-name # will skip if not installed

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

## adjust pylint to deal with fixtures
# pylint: disable=redefined-outer-name


# --- Auto-skip Docker/Testcontainers-backed tests when Docker daemon is unavailable ---


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except Exception:  # pylint: disable=broad-except
        return False
    return True


DOCKER_UP = _docker_available()

PG_FIXTURES = ("postgres_engine", "pg_url", "pg_url_base")


def pytest_collection_modifyitems(items):
    """Skip Postgres/Testcontainers tests if Docker is unavailable."""
    if DOCKER_UP:
        return
    skip = pytest.mark.skip(reason="Docker/Testcontainers backend not available")
    for item in items:
        fixturenames = getattr(item, "fixturenames", ())
        if any(name in fixturenames for name in PG_FIXTURES):
            item.add_marker(skip)
        elif "postgres" in item.nodeid:
            item.add_marker(skip)


# --- Engines ------------------------------------------------------------------


def _start_container() -> Iterator[str]:
    if PostgresContainer is None:
        pytest.skip("testcontainers not installed")

    with PostgresContainer(
        image="postgres:17",
        username="streamstore",
        password="abc123",
        dbname="streamstore",
    ) as pg:
        # testcontainers returns psycopg2 URLs by default; normalize to psycopg v3
        url = pg.get_connection_url()
        yield re.sub(r"\+psycopg2\b", "+psycopg", url)


@pytest.fixture
def pg_url_base() -> Iterator[str]:
    """Per-test Postgres 17 container URL, nothing installed."""
    yield from _start_container()


@pytest.fixture(scope="session")
def pg_url() -> Iterator[str]:
    """Session Postgres 17 container URL with the registry tables installed."""
    for url in _start_container():
        eng = make_engine(url)
        SqlAlchemyEventStore(eng).install()
        eng.dispose()
        yield url


@pytest.fixture
def postgres_engine(pg_url: str) -> Iterator[Engine]:
    """Per-test Postgres engine bound to the session container.

    After the test, drops every stream table (registered or not) and
    truncates the registries (resetting identities).

    Yields:
        Engine: SQLAlchemy engine connected to the session's Postgres.
    """
    eng = make_engine(pg_url)
    try:
        yield eng
    finally:
        with eng.begin() as conn:
            for name in inspect(conn).get_table_names():
                if is_physical_name(name):
                    conn.execute(text(f"DROP TABLE {quote_identifier(name)}"))
            conn.execute(
                text("TRUNCATE TABLE event_streams, projections RESTART IDENTITY")
            )
        eng.dispose()
