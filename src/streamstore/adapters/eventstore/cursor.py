"""Lazy, paginated cursor over the rows of an `EventQuery`.

The cursor fetches one page at a time on a pooled connection, decodes the
rows into `DomainEvent` objects and appends them to its buffer. Nothing is
read until the first `advance()`. The buffer keeps every event fetched so
far, so `restart()` replays them without another query.

Lifecycle::

    NOT_STARTED --advance--> POSITIONED --advance--> POSITIONED | EXHAUSTED
         any --close--> CLOSED
         any --decode/storage failure--> ERRORED --restart--> NOT_STARTED

Paging:

- each page reads ``min(page_size, remaining)`` rows at the current offset;
- a page shorter than requested, or a spent budget, marks the cursor
  exhausted;
- ``count == 0`` means no budget.

When a row cannot be decoded, the rows decoded before it stay buffered and the
offset only moves past them. The error is kept in `error` and re-raised by
every call until `restart()`. Replaying then walks the buffer from the start,
and the failing row is fetched again once the buffer is used up.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from streamstore.adapters.db.errors import error_message
from streamstore.config import DEFAULT_PAGE_SIZE
from streamstore.interfaces.errors import (
    CursorClosedError,
    DecodeFailed,
    EventStoreError,
    InvalidDocumentError,
    StorageFailure,
)
from streamstore.interfaces.events import DomainEvent
from streamstore.interfaces.eventstore import EventCursor

if TYPE_CHECKING:
    from sqlalchemy import RowMapping
    from sqlalchemy.engine import Engine

    from streamstore.interfaces.type_registry import TypeRegistry

    from .queries import EventQuery

logger = logging.getLogger(__name__)


class CursorState(str, enum.Enum):
    """Lifecycle state of a `SqlAlchemyEventCursor`."""

    NOT_STARTED = "not_started"
    POSITIONED = "positioned"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"
    ERRORED = "errored"


class SqlAlchemyEventCursor(EventCursor):  # pylint: disable=too-many-instance-attributes
    """Pages through an `EventQuery` and decodes rows into events.

    Args:
        engine: Engine whose pool serves one connection per page.
        query: Statement to page through.
        registry: Payload decoder; without one payloads are returned as
            stored documents.
        count: Maximum number of events to produce; ``0`` means unbounded.
        page_size: Rows per page.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        engine: Engine,
        query: EventQuery,
        registry: TypeRegistry | None = None,
        count: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if count < 0:
            raise ValueError("count must be >= 0")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        self._engine = engine
        self._query = query
        self._registry = registry
        self._page_size = page_size
        self._remaining: int | None = count or None

        self._buffer: list[DomainEvent] = []
        self._position = -1
        self._offset = 0
        self._exhausted = False
        self._state = CursorState.NOT_STARTED
        self.error: EventStoreError | None = None

    # --------------------------------------------------------------------- #
    # Introspection
    # --------------------------------------------------------------------- #

    @property
    def state(self) -> CursorState:
        """The current lifecycle state."""
        return self._state

    @property
    def query(self) -> EventQuery:
        """The paged statement."""
        return self._query

    # --------------------------------------------------------------------- #
    # EventCursor
    # --------------------------------------------------------------------- #

    def advance(self) -> bool:
        self._check_usable()

        if self._position + 1 < len(self._buffer):
            self._position += 1
            self._state = CursorState.POSITIONED
            return True

        first_new = len(self._buffer)
        if self._exhausted or not self._fetch_page():
            self._position = len(self._buffer)
            self._state = CursorState.EXHAUSTED
            return False

        self._position = first_new
        self._state = CursorState.POSITIONED
        return True

    def current(self) -> DomainEvent | None:
        if self._state is CursorState.NOT_STARTED:
            self.advance()
        self._check_usable()
        if 0 <= self._position < len(self._buffer):
            return self._buffer[self._position]
        return None

    def restart(self) -> None:
        if self._state is CursorState.CLOSED:
            return
        self._position = -1
        self.error = None
        self._state = CursorState.NOT_STARTED

    def is_empty(self) -> bool:
        self.advance()
        return not self._buffer

    def to_list(self) -> list[DomainEvent]:
        return list(self)

    def close(self) -> None:
        self._buffer = []
        self._position = -1
        self._state = CursorState.CLOSED

    def __enter__(self) -> SqlAlchemyEventCursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _check_usable(self) -> None:
        if self._state is CursorState.CLOSED:
            raise CursorClosedError("cursor is closed")
        if self._state is CursorState.ERRORED and self.error is not None:
            raise self.error

    def _fail(self, error: EventStoreError) -> EventStoreError:
        self.error = error
        self._state = CursorState.ERRORED
        return error

    def _fetch_page(self) -> bool:
        """Append the next page to the buffer; False if it is empty."""
        limit = (
            self._page_size
            if self._remaining is None
            else min(self._page_size, self._remaining)
        )
        if limit == 0:
            self._exhausted = True
            return False

        try:
            with self._engine.connect() as conn:
                rows = conn.execute(self._query.page(limit, self._offset)).mappings().all()
        except SQLAlchemyError as e:
            raise self._fail(StorageFailure(error_message(e))) from e

        logger.debug(
            "Fetched %d row(s) at offset %d (limit %d)", len(rows), self._offset, limit
        )
        if not rows:
            self._exhausted = True
            return False

        decoded: list[DomainEvent] = []
        try:
            for row in rows:
                decoded.append(self._decode(row))
        except DecodeFailed as e:
            self._consume(decoded)
            raise self._fail(e) from e

        self._consume(decoded)
        if len(rows) < limit or self._remaining == 0:
            self._exhausted = True
        return bool(decoded)

    def _consume(self, events: list[DomainEvent]) -> None:
        self._buffer.extend(events)
        self._offset += len(events)
        if self._remaining is not None:
            self._remaining -= len(events)

    def _decode(self, row: RowMapping) -> DomainEvent:
        name = row["event_name"]
        payload: Any = row["payload"]
        if self._registry is not None:
            payload = self._registry.decode(name, payload)
        try:
            return DomainEvent(
                name=name,
                payload=payload,
                metadata=row["metadata"] or {},
                event_id=row["event_id"],
                created_at=row["created_at"],
                no=row["no"],
                stream_name=row["stream"],
            )
        except InvalidDocumentError as e:
            raise DecodeFailed(name, str(e)) from e
