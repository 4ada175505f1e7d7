"""STREAMSTORE ports, DTOs and errors."""

from .documents import Document, DocumentValue, validate_document
from .errors import (
    ConcurrencyConflict,
    CursorClosedError,
    DecodeFailed,
    DuplicateEventId,
    EventStoreError,
    InvalidDocumentError,
    InvalidMatcherError,
    ProjectionNotFound,
    SchemaCreationFailed,
    StorageFailure,
    StreamAlreadyExists,
    StreamNotFound,
)
from .events import (
    AGGREGATE_ID_KEY,
    AGGREGATE_TYPE_KEY,
    AGGREGATE_VERSION_KEY,
    DomainEvent,
)
from .eventstore import SYSTEM_STREAM_PREFIX, EventCursor, EventStore
from .matcher import (
    FieldKind,
    LoadStreamParameter,
    MetadataMatch,
    MetadataMatcher,
    Operator,
    matcher_from,
)
from .projection_store import ProjectionStatus, ProjectionStore, StreamPositions
from .type_registry import TypeRegistry

__all__ = [
    "AGGREGATE_ID_KEY",
    "AGGREGATE_TYPE_KEY",
    "AGGREGATE_VERSION_KEY",
    "ConcurrencyConflict",
    "CursorClosedError",
    "DecodeFailed",
    "Document",
    "DocumentValue",
    "DomainEvent",
    "DuplicateEventId",
    "EventCursor",
    "EventStore",
    "EventStoreError",
    "FieldKind",
    "InvalidDocumentError",
    "InvalidMatcherError",
    "LoadStreamParameter",
    "MetadataMatch",
    "MetadataMatcher",
    "Operator",
    "ProjectionNotFound",
    "ProjectionStatus",
    "ProjectionStore",
    "SYSTEM_STREAM_PREFIX",
    "SchemaCreationFailed",
    "StorageFailure",
    "StreamAlreadyExists",
    "StreamNotFound",
    "StreamPositions",
    "TypeRegistry",
    "matcher_from",
    "validate_document",
]
