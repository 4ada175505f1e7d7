"""Integration tests for the batch writer and its error translation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from streamstore.adapters.eventstore import (
    SchemaManager,
    SqlAlchemyEventWriter,
    SqlAlchemyStreamRegistry,
)
from streamstore.interfaces import (
    ConcurrencyConflict,
    DomainEvent,
    StorageFailure,
    StreamNotFound,
)
from tests.fixtures.datagen import OrderPlaced

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=redefined-outer-name

pytestmark = pytest.mark.parametrize(
    "engine",
    ["sqlite_engine_memory", "sqlite_engine_file", "postgres_engine"],
    indirect=True,
)


@pytest.fixture
def orders(engine: Engine) -> str:
    with engine.begin() as conn:
        SqlAlchemyStreamRegistry(conn).register("orders")
        SchemaManager(conn).create_stream_schema("orders")
    return "orders"


def _count(engine: Engine, stream_name: str) -> int:
    with engine.connect() as conn:
        table = SchemaManager(conn).table_for(stream_name)
        return conn.execute(
            select(func.count()).select_from(table)  # pylint: disable=not-callable
        ).scalar_one()


def test_writes_rows_in_order(engine: Engine, orders: str, make_events):
    events = make_events(3)
    with engine.begin() as conn:
        SqlAlchemyEventWriter(conn).append_to(orders, events)

    with engine.connect() as conn:
        table = SchemaManager(conn).table_for(orders)
        rows = conn.execute(select(table).order_by(table.c.no)).all()

    assert [r.no for r in rows] == [1, 2, 3]
    assert [r.event_id for r in rows] == [e.event_id for e in events]
    assert [r.created_at for r in rows] == [e.created_at for e in events]


def test_unknown_stream(engine: Engine, make_event):
    with engine.begin() as conn:
        with pytest.raises(StreamNotFound):
            SqlAlchemyEventWriter(conn).append_to("nope", [make_event(1)])


def test_conflict_is_detected_by_index_name(engine: Engine, orders: str, make_event):
    with engine.begin() as conn:
        SqlAlchemyEventWriter(conn).append_to(orders, [make_event(1)])

    with pytest.raises(ConcurrencyConflict) as excinfo:
        with engine.begin() as conn:
            SqlAlchemyEventWriter(conn).append_to(orders, [make_event(1)])

    assert "aggregate_version" in excinfo.value.detail
    assert _count(engine, orders) == 1


def test_non_mapping_payload_needs_a_registry(engine: Engine, orders: str):
    event = DomainEvent.for_aggregate(
        "OrderPlaced",
        OrderPlaced("o-1", 1),
        aggregate_type="Order",
        aggregate_id="o-1",
        aggregate_version=1,
    )
    with pytest.raises(StorageFailure):
        with engine.begin() as conn:
            SqlAlchemyEventWriter(conn).append_to(orders, [event])


def test_registry_encodes_payloads(
    engine: Engine, orders: str, make_event, payload_registry
):
    with engine.begin() as conn:
        SqlAlchemyEventWriter(conn, payload_registry).append_to(
            orders, [make_event(1, payload=OrderPlaced("o-1", 5))]
        )

    with engine.connect() as conn:
        table = SchemaManager(conn).table_for(orders)
        payload = conn.execute(select(table.c.payload)).scalar_one()

    assert payload == {"order_id": "o-1", "total": 5}
