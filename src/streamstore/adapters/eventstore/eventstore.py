"""SQLAlchemy-backed EventStore adapter for STREAMSTORE.

This module wires the building blocks (schema manager, stream registry, event
writer, query builders and cursor) into the `EventStore` port. Every write
operation runs in its own ``engine.begin()`` transaction:

- `create_stream` registers the name and creates the table together;
- `delete_stream` unregisters and drops together;
- `append_to` writes the whole batch or nothing.

Any exception raised inside one of these transactions, including
``KeyboardInterrupt``, rolls it back. Reads return lazy cursors that check out
one pooled connection per page.

Usage:
    ```python
    store = SqlAlchemyEventStore(make_engine("sqlite:///events.db"))
    store.install()
    store.create_stream("orders")
    store.append_to("orders", [DomainEvent.for_aggregate(...)])
    for event in store.load("orders"):
        ...
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from streamstore.adapters.db.errors import storage_errors
from streamstore.config import DEFAULT_PAGE_SIZE
from streamstore.interfaces.eventstore import EventStore

from .cursor import SqlAlchemyEventCursor
from .queries import StreamSelection, merged_query, stream_query
from .schema_manager import SchemaManager
from .stream_registry import SqlAlchemyStreamRegistry
from .writer import SqlAlchemyEventWriter

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from streamstore.interfaces.events import DomainEvent
    from streamstore.interfaces.matcher import LoadStreamParameter, MetadataMatcher
    from streamstore.interfaces.type_registry import TypeRegistry

    from .queries import EventQuery

logger = logging.getLogger(__name__)


class SqlAlchemyEventStore(EventStore):
    """SQLAlchemy-backed EventStore.

    Args:
        engine: Engine for the target database.
        registry: Payload registry used to encode on append and decode on
            read. Without one, payloads must be mappings and are returned as
            stored documents.
        page_size: Rows per cursor page.
    """

    def __init__(
        self,
        engine: Engine,
        registry: TypeRegistry | None = None,
        page_size: int | None = None,
    ):
        self.engine = engine
        self.registry = registry
        self.page_size = page_size or DEFAULT_PAGE_SIZE

    # --------------------------------------------------------------------- #
    # Schema
    # --------------------------------------------------------------------- #

    def install(self) -> None:
        with storage_errors(), self.engine.begin() as conn:
            SchemaManager(conn).ensure_registry_tables()
        logger.info("Event store installed")

    # --------------------------------------------------------------------- #
    # Streams
    # --------------------------------------------------------------------- #

    def create_stream(self, stream_name: str) -> None:
        with storage_errors(), self.engine.begin() as conn:
            # registry row first: SQLite only opens the transaction on DML
            SqlAlchemyStreamRegistry(conn).register(stream_name)
            SchemaManager(conn).create_stream_schema(stream_name)
        logger.info("Created stream %r", stream_name)

    def delete_stream(self, stream_name: str) -> None:
        with storage_errors(), self.engine.begin() as conn:
            SqlAlchemyStreamRegistry(conn).delete_stream(stream_name)
        logger.info("Deleted stream %r", stream_name)

    def has_stream(self, stream_name: str) -> bool:
        with storage_errors(), self.engine.connect() as conn:
            return SqlAlchemyStreamRegistry(conn).has(stream_name)

    def fetch_stream_names(self) -> list[str]:
        with storage_errors(), self.engine.connect() as conn:
            return SqlAlchemyStreamRegistry(conn).list_stream_names()

    # --------------------------------------------------------------------- #
    # Append
    # --------------------------------------------------------------------- #

    def append_to(self, stream_name: str, events: Sequence[DomainEvent]) -> None:
        if not events:
            return
        with storage_errors(), self.engine.begin() as conn:
            SqlAlchemyEventWriter(conn, self.registry).append_to(stream_name, events)

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def load(
        self,
        stream_name: str,
        from_number: int = 1,
        count: int = 0,
        matcher: MetadataMatcher = (),
    ) -> SqlAlchemyEventCursor:
        with storage_errors(), self.engine.connect() as conn:
            physical = SqlAlchemyStreamRegistry(conn).require(stream_name)
            query = stream_query(
                stream_name, physical, conn.dialect, from_number, matcher
            )
        return self._cursor(query, count)

    def merge_and_load(
        self, *streams: LoadStreamParameter, count: int = 0
    ) -> SqlAlchemyEventCursor:
        if not streams:
            raise ValueError("merge_and_load() needs at least one stream")

        with storage_errors(), self.engine.connect() as conn:
            registry = SqlAlchemyStreamRegistry(conn)
            selections = [
                StreamSelection(
                    stream_name=stream.stream_name,
                    physical_name=registry.require(stream.stream_name),
                    from_number=stream.from_number,
                    matcher=stream.matcher,
                )
                for stream in streams
            ]
            query = merged_query(selections, conn.dialect)
        return self._cursor(query, count)

    def _cursor(self, query: EventQuery, count: int) -> SqlAlchemyEventCursor:
        return SqlAlchemyEventCursor(
            self.engine,
            query,
            registry=self.registry,
            count=count,
            page_size=self.page_size,
        )
