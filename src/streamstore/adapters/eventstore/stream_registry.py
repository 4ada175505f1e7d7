"""Registry of logical streams, backed by the ``event_streams`` table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from streamstore.interfaces.errors import StreamAlreadyExists, StreamNotFound
from streamstore.interfaces.eventstore import SYSTEM_STREAM_PREFIX

from .naming import physical_table_name
from .schema import event_streams
from .schema_manager import SchemaManager

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)


class SqlAlchemyStreamRegistry:
    """Maps logical stream names to their physical tables.

    All statements run on the given connection and therefore inside the
    caller's transaction.
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    # --- writes ---

    def register(self, stream_name: str) -> str:
        """Add a registry row for ``stream_name``.

        Returns:
            The physical table name of the stream.

        Raises:
            StreamAlreadyExists: If the logical name, or a name hashing to the
                same table, is already registered.
        """
        physical = physical_table_name(stream_name)
        try:
            self.connection.execute(
                insert(event_streams).values(
                    real_stream_name=stream_name,
                    stream_name=physical,
                    metadata={},
                )
            )
        except IntegrityError as e:
            raise StreamAlreadyExists(stream_name) from e
        logger.debug("Registered stream %r as %s", stream_name, physical)
        return physical

    def unregister(self, stream_name: str) -> None:
        """Remove the registry row for ``stream_name``.

        Raises:
            StreamNotFound: If no row was removed.
        """
        result = self.connection.execute(
            delete(event_streams).where(
                event_streams.c.real_stream_name == stream_name
            )
        )
        if result.rowcount == 0:
            raise StreamNotFound(stream_name)
        logger.debug("Unregistered stream %r", stream_name)

    def delete_stream(self, stream_name: str) -> None:
        """Unregister a stream and drop its table.

        The table is left untouched when the stream is not registered.

        Raises:
            StreamNotFound: If the stream is not registered.
        """
        self.unregister(stream_name)
        SchemaManager(self.connection).drop_stream_schema(stream_name)

    # --- reads ---

    def has(self, stream_name: str) -> bool:
        """Whether ``stream_name`` is registered."""
        stmt = select(event_streams.c.no).where(
            event_streams.c.real_stream_name == stream_name
        )
        return self.connection.execute(stmt).first() is not None

    def require(self, stream_name: str) -> str:
        """Return the physical table of a registered stream.

        Raises:
            StreamNotFound: If the stream is not registered.
        """
        stmt = select(event_streams.c.stream_name).where(
            event_streams.c.real_stream_name == stream_name
        )
        if (physical := self.connection.execute(stmt).scalar_one_or_none()) is None:
            raise StreamNotFound(stream_name)
        return str(physical).strip()

    def list_stream_names(self) -> list[str]:
        """Registered stream names in registration order, system streams excluded."""
        stmt = (
            select(event_streams.c.real_stream_name)
            .where(~event_streams.c.real_stream_name.startswith(SYSTEM_STREAM_PREFIX))
            .order_by(event_streams.c.no.asc())
        )
        return list(self.connection.execute(stmt).scalars())
