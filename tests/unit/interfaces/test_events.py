"""Unit tests for the DomainEvent DTO."""

from datetime import datetime, timezone

import pytest

from streamstore.interfaces import (
    AGGREGATE_ID_KEY,
    AGGREGATE_TYPE_KEY,
    AGGREGATE_VERSION_KEY,
    DomainEvent,
    InvalidDocumentError,
)


def test_for_aggregate_sets_coordinates():
    event = DomainEvent.for_aggregate(
        "OrderPlaced",
        {"total": 3},
        aggregate_type="Order",
        aggregate_id="o-1",
        aggregate_version=2,
        metadata={"region": "eu"},
    )

    assert event.metadata == {
        "region": "eu",
        AGGREGATE_TYPE_KEY: "Order",
        AGGREGATE_ID_KEY: "o-1",
        AGGREGATE_VERSION_KEY: 2,
    }
    assert (event.aggregate_type, event.aggregate_id, event.aggregate_version) == (
        "Order",
        "o-1",
        2,
    )


def test_defaults():
    event = DomainEvent("Tick", {})

    assert event.metadata == {}
    assert event.created_at.utcoffset() is not None
    assert event.no is None and event.stream_name is None
    assert event.aggregate_version is None
    assert DomainEvent("Tick", {}).event_id != event.event_id


def test_with_added_metadata_returns_a_copy():
    event = DomainEvent("Tick", {}, metadata={"a": "1"})
    tagged = event.with_added_metadata("b", 2)

    assert tagged.metadata == {"a": "1", "b": 2}
    assert event.metadata == {"a": "1"}
    assert tagged.event_id == event.event_id


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": " "},
        {"created_at": datetime(2024, 1, 1)},
        {"metadata": {"a": [1]}},
    ],
)
def test_invalid_events(kwargs):
    values = {
        "name": "Tick",
        "payload": {},
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    values.update(kwargs)
    with pytest.raises(InvalidDocumentError):
        DomainEvent(**values)
