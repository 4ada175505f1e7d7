"""Integration tests for the stream table DDL.

Run against both backends via the indirect `engine` fixture. They check the
reflected shape of a stream table (constraint and index names are part of
the contract) and the idempotence of the DDL helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, text

from streamstore.adapters.eventstore import SchemaManager, physical_table_name
from streamstore.adapters.eventstore.schema import (
    concurrency_index_name,
    replay_index_name,
)
from streamstore.interfaces import SchemaCreationFailed

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

pytestmark = pytest.mark.parametrize(
    "engine",
    ["sqlite_engine_memory", "sqlite_engine_file", "postgres_engine"],
    indirect=True,
)

PHYSICAL = physical_table_name("orders")

INDEX_NAMES_SQL = {
    "sqlite": "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = :t",
    "postgresql": "SELECT indexname FROM pg_indexes WHERE tablename = :t",
}


def _index_names(engine: Engine, table: str) -> set[str]:
    # expression indexes are not reflected uniformly by the inspector
    with engine.connect() as conn:
        sql = INDEX_NAMES_SQL[conn.dialect.name]
        return set(conn.execute(text(sql), {"t": table}).scalars())


def test_registry_tables_installed(engine: Engine):
    tables = set(inspect(engine).get_table_names())
    assert {"event_streams", "projections"} <= tables


def test_install_is_idempotent(engine: Engine):
    with engine.begin() as conn:
        SchemaManager(conn).ensure_registry_tables()
        SchemaManager(conn).ensure_registry_tables()


def test_stream_table_shape(engine: Engine):
    with engine.begin() as conn:
        SchemaManager(conn).create_stream_schema("orders")

    inspector = inspect(engine)
    columns = [c["name"] for c in inspector.get_columns(PHYSICAL)]
    checks = {ck["name"] for ck in inspector.get_check_constraints(PHYSICAL)}

    assert columns == ["no", "event_id", "event_name", "payload", "metadata", "created_at"]
    assert inspector.get_pk_constraint(PHYSICAL)["constrained_columns"] == ["no"]
    assert {
        concurrency_index_name(PHYSICAL),
        replay_index_name(PHYSICAL),
    } <= _index_names(engine, PHYSICAL)
    assert {
        f"ck_{PHYSICAL}_aggregate_type",
        f"ck_{PHYSICAL}_aggregate_id",
        f"ck_{PHYSICAL}_aggregate_version",
    } <= checks


def test_has_and_drop_stream_table(engine: Engine):
    with engine.begin() as conn:
        manager = SchemaManager(conn)
        manager.create_stream_schema("orders")
        assert manager.has_stream_table("orders")

        manager.drop_stream_schema("orders")
        assert not manager.has_stream_table("orders")

        # dropping a missing table is not an error
        manager.drop_stream_schema("orders")


def test_creating_an_existing_table_fails(engine: Engine):
    with engine.begin() as conn:
        SchemaManager(conn).create_stream_schema("orders")

    with pytest.raises(SchemaCreationFailed) as excinfo:
        with engine.begin() as conn:
            SchemaManager(conn).create_stream_schema("orders")

    assert excinfo.value.stream_name == "orders"
