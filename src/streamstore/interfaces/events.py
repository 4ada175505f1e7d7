"""The `DomainEvent` DTO exchanged with the event store.

An event is written by `append_to` and read back by a cursor. Before
persistence `no` and `stream_name` are None; the store fills them in on read.

Every persisted event must carry its aggregate coordinates in its metadata
(`_aggregate_type`, `_aggregate_id`, `_aggregate_version`). The physical
tables enforce their presence and the uniqueness of the triple, which is the
optimistic-concurrency guarantee of the store.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .documents import Document, DocumentValue, as_document
from .errors import InvalidDocumentError

AGGREGATE_TYPE_KEY = "_aggregate_type"
AGGREGATE_ID_KEY = "_aggregate_id"
AGGREGATE_VERSION_KEY = "_aggregate_version"

AGGREGATE_KEYS = (AGGREGATE_TYPE_KEY, AGGREGATE_ID_KEY, AGGREGATE_VERSION_KEY)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """A single event, either about to be appended or read from a stream.

    Attributes:
        name: Event type tag; the payload registry is keyed by it.
        payload: The event body. Before encoding this may be any value the
            registry can encode; without a registry it must be a mapping.
        metadata: Structured document; must include the aggregate keys
            before it can be appended.
        event_id: Globally unique identifier.
        created_at: UTC, tz-aware creation time.
        no: Sequence number within the stream (assigned by the store).
        stream_name: Logical stream the event was read from.
    """

    name: str
    payload: Any
    metadata: Document = field(default_factory=dict)
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    no: int | None = None
    stream_name: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise InvalidDocumentError("event name must be non-empty")
        if self.created_at.tzinfo is None or self.created_at.utcoffset() is None:
            raise InvalidDocumentError("created_at must be tz-aware")
        object.__setattr__(self, "metadata", as_document(self.metadata))

    @classmethod
    def for_aggregate(  # pylint: disable=too-many-arguments
        cls,
        name: str,
        payload: Any,
        *,
        aggregate_type: str,
        aggregate_id: str,
        aggregate_version: int,
        metadata: Mapping[str, DocumentValue] | None = None,
        **kwargs: Any,
    ) -> DomainEvent:
        """Build an event tagged with its aggregate coordinates."""
        merged: Document = dict(metadata or {})
        merged[AGGREGATE_TYPE_KEY] = aggregate_type
        merged[AGGREGATE_ID_KEY] = aggregate_id
        merged[AGGREGATE_VERSION_KEY] = aggregate_version
        return cls(name=name, payload=payload, metadata=merged, **kwargs)

    def with_added_metadata(self, key: str, value: DocumentValue) -> DomainEvent:
        """Return a copy of this event with one more metadata entry."""
        return replace(self, metadata={**self.metadata, key: value})

    @property
    def aggregate_type(self) -> str | None:
        """The aggregate type from metadata, if present."""
        value = self.metadata.get(AGGREGATE_TYPE_KEY)
        return None if value is None else str(value)

    @property
    def aggregate_id(self) -> str | None:
        """The aggregate id from metadata, if present."""
        value = self.metadata.get(AGGREGATE_ID_KEY)
        return None if value is None else str(value)

    @property
    def aggregate_version(self) -> int | None:
        """The aggregate version from metadata, if present."""
        value = self.metadata.get(AGGREGATE_VERSION_KEY)
        return None if value is None else int(value)  # type: ignore[arg-type]
