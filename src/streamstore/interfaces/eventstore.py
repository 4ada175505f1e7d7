"""Event store port for STREAMSTORE.

Layering & dependency rules:
- Lives under `streamstore.interfaces`. Do NOT import from adapters or entrypoints.
- Safe to import from adapters and entrypoints.

Contract overview
-----------------
Streams:
- `create_stream(name)` registers the logical name and creates its physical
  table atomically; a second registration raises `StreamAlreadyExists`.
- `delete_stream(name)` removes the registry row and drops the table; an
  unknown name raises `StreamNotFound` and drops nothing.
- `fetch_stream_names()` excludes system streams (names starting with ``$``).

Append:
- `append_to(name, events)` writes the whole batch in one transaction, in the
  given order, or nothing at all.
- A taken `(aggregate_type, aggregate_id, aggregate_version)` raises
  `ConcurrencyConflict`; other faults raise `StorageFailure`.

Reads:
- `load(name, from_number, count, matcher)` returns a lazy cursor over events
  with ``no >= from_number`` in ascending sequence order.
- `merge_and_load(*streams, count)` interleaves several streams by
  ``created_at``. Every stream is checked before any page is read; an unknown
  one raises `StreamNotFound`.
- ``count`` bounds the number of produced events; ``0`` means unbounded.
"""

from __future__ import annotations

import abc
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .events import DomainEvent
    from .matcher import LoadStreamParameter, MetadataMatcher


SYSTEM_STREAM_PREFIX = "$"


class EventCursor(abc.ABC):
    """A lazy, paginated, restartable sequence of decoded events."""

    @abc.abstractmethod
    def advance(self) -> bool:
        """Move to the next event, fetching a page if needed.

        Returns:
            True if positioned on an event, False once exhausted.
        """

    @abc.abstractmethod
    def current(self) -> DomainEvent | None:
        """The event at the current position (advances once if not started)."""

    @abc.abstractmethod
    def restart(self) -> None:
        """Replay the already-fetched events from the start and clear a stored error.

        Nothing is re-queried; reading past the buffered events fetches the
        next page as usual.
        """

    @abc.abstractmethod
    def is_empty(self) -> bool:
        """Advance once and report whether no event was ever produced."""

    @abc.abstractmethod
    def to_list(self) -> list[DomainEvent]:
        """Advance until exhausted and collect every produced event."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release buffered events; later calls raise `CursorClosedError`."""

    def __iter__(self) -> Iterator[DomainEvent]:
        while self.advance():
            event = self.current()
            assert event is not None  # positioned
            yield event


class EventStore(abc.ABC):
    """An abstract base class for an event store."""

    @abc.abstractmethod
    def install(self) -> None:
        """Create the stream and projection registry tables if absent."""

    @abc.abstractmethod
    def create_stream(self, stream_name: str) -> None:
        """Register a stream and create its physical table.

        Raises:
            StreamAlreadyExists: If the name is already registered.
            SchemaCreationFailed: If the table could not be created.
        """

    @abc.abstractmethod
    def delete_stream(self, stream_name: str) -> None:
        """Unregister a stream and drop its physical table.

        Raises:
            StreamNotFound: If the name is not registered.
        """

    @abc.abstractmethod
    def has_stream(self, stream_name: str) -> bool:
        """Whether the stream is registered."""

    @abc.abstractmethod
    def fetch_stream_names(self) -> list[str]:
        """Registered, non-system stream names in registration order."""

    @abc.abstractmethod
    def append_to(self, stream_name: str, events: Sequence[DomainEvent]) -> None:
        """Append a batch of events atomically.

        Raises:
            StreamNotFound: If the stream is not registered.
            ConcurrencyConflict: If an aggregate version is already taken.
            StorageFailure: For any other storage fault.
        """

    @abc.abstractmethod
    def load(
        self,
        stream_name: str,
        from_number: int = 1,
        count: int = 0,
        matcher: MetadataMatcher = (),
    ) -> EventCursor:
        """Return a cursor over one stream.

        Raises:
            StreamNotFound: If the stream is not registered.
            InvalidMatcherError: If the matcher cannot be compiled.
        """

    @abc.abstractmethod
    def merge_and_load(
        self, *streams: LoadStreamParameter, count: int = 0
    ) -> EventCursor:
        """Return a cursor interleaving several streams by creation time.

        Raises:
            StreamNotFound: If any stream is not registered.
            InvalidMatcherError: If any matcher cannot be compiled.
            ValueError: If no stream is given.
        """
