"""Pytest fixtures for EventStore contract tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from streamstore.adapters.eventstore import SqlAlchemyEventStore

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=redefined-outer-name

BACKENDS = ["sqlite_engine_memory", "sqlite_engine_file", "postgres_engine"]

#: Small enough that a handful of events spans several pages.
CONTRACT_PAGE_SIZE = 2


@pytest.fixture(params=BACKENDS)
def store_engine(request: pytest.FixtureRequest) -> Engine:
    """Engine for each backend the contract runs against."""
    return request.getfixturevalue(request.param)


@pytest.fixture
def store(store_engine: Engine) -> SqlAlchemyEventStore:
    """A fresh event store with a tiny page size."""
    return SqlAlchemyEventStore(store_engine, page_size=CONTRACT_PAGE_SIZE)


@pytest.fixture
def orders(store: SqlAlchemyEventStore) -> str:
    """A registered, empty ``orders`` stream."""
    store.create_stream("orders")
    return "orders"
