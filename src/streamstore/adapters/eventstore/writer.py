"""Atomic batch append into a stream's event table.

The writer executes a single multi-row insert on the caller's connection; the
caller owns the transaction, so a batch is either fully persisted or not at
all. Database errors are translated into event store errors:

| Database error                                     | Raised                |
|----------------------------------------------------|-----------------------|
| unique violation of ``uq_<table>_aggregate_version`` | `ConcurrencyConflict` |
| unique violation on ``event_id``                   | `DuplicateEventId`    |
| any other integrity / data / driver error          | `StorageFailure`      |
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError

from streamstore.adapters.db.dialects import DialectName
from streamstore.adapters.db.errors import error_message
from streamstore.interfaces.documents import as_document
from streamstore.interfaces.errors import (
    ConcurrencyConflict,
    DuplicateEventId,
    StorageFailure,
)

from .schema import concurrency_index_name, stream_table
from .stream_registry import SqlAlchemyStreamRegistry

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

    from streamstore.interfaces.events import DomainEvent
    from streamstore.interfaces.type_registry import TypeRegistry

logger = logging.getLogger(__name__)

# all flags must be present
UNIQUE_EVENT_ID_CONSTRAINT_KEYWORDS = ("event_id", "unique")

EMPTY_STRING = ""


class SqlAlchemyEventWriter:
    """Appends event batches to registered streams."""

    def __init__(self, connection: Connection, registry: TypeRegistry | None = None):
        self.connection = connection
        self.registry = registry

    def append_to(self, stream_name: str, events: Sequence[DomainEvent]) -> None:
        """Insert ``events`` into the stream's table in the given order.

        An empty batch is a no-op.

        Raises:
            StreamNotFound: If the stream is not registered.
            ConcurrencyConflict: If an aggregate version is already taken.
            DuplicateEventId: If an event id is already present.
            StorageFailure: For any other storage fault.
        """
        if not events:
            return

        physical = SqlAlchemyStreamRegistry(self.connection).require(stream_name)
        table = stream_table(physical, DialectName.from_sqlalchemy(self.connection))
        rows = [self._as_row(event) for event in events]

        try:
            self.connection.execute(insert(table), rows)
        except IntegrityError as e:
            self._raise_from_integrity_error(stream_name, physical, e)
        except DataError as e:  # value too long, bad JSON, etc.
            raise StorageFailure(error_message(e)) from e
        except SQLAlchemyError as e:  # OperationalError, StatementError, etc.
            raise StorageFailure(error_message(e)) from e

        logger.debug("Appended %d event(s) to stream %r", len(rows), stream_name)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _encode_payload(self, event: DomainEvent) -> Any:
        if self.registry is not None and event.name in self.registry:
            return self.registry.encode(event.name, event.payload)
        if isinstance(event.payload, Mapping):
            return dict(event.payload)
        if self.registry is not None:
            return self.registry.encode(event.name, event.payload)
        raise StorageFailure(
            f"Payload of '{event.name}' is not a mapping and no payload registry"
            " is configured"
        )

    def _as_row(self, event: DomainEvent) -> dict[str, Any]:
        return {
            "event_id": event.event_id,
            "event_name": event.name,
            "payload": self._encode_payload(event),
            "metadata": as_document(event.metadata),
            "created_at": event.created_at,
        }

    @staticmethod
    def _raise_from_integrity_error(
        stream_name: str, physical_name: str, integrity_error: IntegrityError
    ) -> None:
        """Translate an IntegrityError into the matching event store error.

        Raises:
            ConcurrencyConflict: If the aggregate version index was violated.
            DuplicateEventId: If the event id unique constraint was violated.
            StorageFailure: For any other integrity error, including missing
                aggregate keys.
        """
        msg = (
            str(integrity_error.orig)
            if integrity_error.orig not in (None, EMPTY_STRING)
            else str(integrity_error)
        )

        if concurrency_index_name(physical_name) in msg:
            raise ConcurrencyConflict(stream_name, msg) from integrity_error

        if all(kw in msg.lower() for kw in UNIQUE_EVENT_ID_CONSTRAINT_KEYWORDS):
            raise DuplicateEventId(msg) from integrity_error

        raise StorageFailure(msg) from integrity_error
