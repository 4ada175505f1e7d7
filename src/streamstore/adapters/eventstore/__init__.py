"""SQLAlchemy implementation of the event store and projection store."""

from .cursor import CursorState, SqlAlchemyEventCursor
from .eventstore import SqlAlchemyEventStore
from .naming import physical_table_name
from .projection_store import SqlAlchemyProjectionStore
from .query_compiler import CompiledFilter, compile_matcher
from .schema_manager import SchemaManager
from .stream_registry import SqlAlchemyStreamRegistry
from .writer import SqlAlchemyEventWriter

__all__ = [
    "CompiledFilter",
    "CursorState",
    "SchemaManager",
    "SqlAlchemyEventCursor",
    "SqlAlchemyEventStore",
    "SqlAlchemyEventWriter",
    "SqlAlchemyProjectionStore",
    "SqlAlchemyStreamRegistry",
    "compile_matcher",
    "physical_table_name",
]
