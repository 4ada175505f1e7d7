"""DDL for the registry tables and the per-stream event tables.

The manager runs on a caller-supplied `Connection`, so its DDL joins whatever
transaction the caller has open. `SqlAlchemyEventStore` relies on this to
register a stream and create its table atomically.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import inspect
from sqlalchemy.exc import DBAPIError

from streamstore.adapters.db.dialects import DialectName
from streamstore.adapters.db.metadata import metadata
from streamstore.interfaces.errors import SchemaCreationFailed

from .naming import physical_table_name
from .schema import stream_table

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)


class SchemaManager:
    """Creates and drops the tables backing the event store."""

    def __init__(self, connection: Connection):
        self.connection = connection
        self.dialect = DialectName.from_sqlalchemy(connection)

    def table_for(self, logical_name: str) -> Table:
        """The event table definition for a logical stream name."""
        return stream_table(physical_table_name(logical_name), self.dialect)

    def ensure_registry_tables(self) -> None:
        """Create ``event_streams`` and ``projections`` unless they exist."""
        metadata.create_all(self.connection, checkfirst=True)
        logger.debug("Registry tables ensured")

    def create_stream_schema(self, logical_name: str) -> None:
        """Create the event table of a stream with its indexes and constraints.

        Raises:
            SchemaCreationFailed: If the database rejects any of the DDL.
        """
        table = self.table_for(logical_name)
        try:
            table.create(self.connection)
        except DBAPIError as e:
            raise SchemaCreationFailed(logical_name, str(e.orig or e)) from e
        logger.debug("Created table %s for stream %r", table.name, logical_name)

    def drop_stream_schema(self, logical_name: str) -> None:
        """Drop the event table of a stream; a missing table is not an error."""
        table = self.table_for(logical_name)
        table.drop(self.connection, checkfirst=True)
        logger.debug("Dropped table %s for stream %r", table.name, logical_name)

    def has_stream_table(self, logical_name: str) -> bool:
        """Whether the event table of a stream exists."""
        return inspect(self.connection).has_table(physical_table_name(logical_name))
