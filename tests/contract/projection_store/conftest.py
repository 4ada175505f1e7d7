"""Pytest fixtures for ProjectionStore contract tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from streamstore.adapters.eventstore import SqlAlchemyProjectionStore

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=redefined-outer-name

BACKENDS = ["sqlite_engine_memory", "sqlite_engine_file", "postgres_engine"]


@pytest.fixture(params=BACKENDS)
def projection_store(request: pytest.FixtureRequest) -> SqlAlchemyProjectionStore:
    """A projection store on each backend the contract runs against."""
    engine: Engine = request.getfixturevalue(request.param)
    return SqlAlchemyProjectionStore(engine)
