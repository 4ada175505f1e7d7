"""Exceptions raised by STREAMSTORE components.

Every error a caller may want to react to is a distinct type so it can be
caught by class rather than by inspecting messages:

| Error                   | Raised when                                          |
|-------------------------|------------------------------------------------------|
| `StreamNotFound`        | a stream is not registered                           |
| `StreamAlreadyExists`   | registering a name (or its table name) twice         |
| `ProjectionNotFound`    | no projection row matches the name                   |
| `ConcurrencyConflict`   | aggregate version already taken in the stream        |
| `SchemaCreationFailed`  | the database rejected a stream table's DDL           |
| `StorageFailure`        | any other driver / constraint / connectivity fault   |
| `DecodeFailed`          | a payload could not be decoded for its event name    |

No component retries on its own; retry-on-conflict is a caller decision.
"""


class EventStoreError(Exception):
    """Base class for STREAMSTORE errors."""


class StreamNotFound(EventStoreError):
    """The stream is not registered.

    Attributes:
        stream_name (str): The logical name of the missing stream.
    """

    def __init__(self, stream_name: str):
        super().__init__(f"Stream '{stream_name}' not found.")
        self.stream_name = stream_name


class StreamAlreadyExists(EventStoreError):
    """A stream with the same logical (or physical) name is already registered.

    Attributes:
        stream_name (str): The logical name that was registered twice.
    """

    def __init__(self, stream_name: str):
        super().__init__(f"Stream '{stream_name}' already exists.")
        self.stream_name = stream_name


class ProjectionNotFound(EventStoreError):
    """No projection row matches the given name.

    Attributes:
        projection_name (str): The name of the missing projection.
    """

    def __init__(self, projection_name: str):
        super().__init__(f"Projection '{projection_name}' not found.")
        self.projection_name = projection_name


class ConcurrencyConflict(EventStoreError):
    """An event with the same aggregate type, id and version already exists.

    Callers should reload the aggregate and retry with a fresh version.

    Attributes:
        stream_name (str): The stream the append targeted.
        detail (str): The underlying database message.
    """

    def __init__(self, stream_name: str, detail: str = ""):
        super().__init__(
            f"Concurrency conflict while appending to stream '{stream_name}'."
            + (f" {detail}" if detail else "")
        )
        self.stream_name = stream_name
        self.detail = detail


class SchemaCreationFailed(EventStoreError):
    """The database rejected the DDL for a stream table.

    Attributes:
        stream_name (str): The stream whose table could not be created.
    """

    def __init__(self, stream_name: str, detail: str = ""):
        super().__init__(
            f"Could not create the schema for stream '{stream_name}'."
            + (f" {detail}" if detail else "")
        )
        self.stream_name = stream_name
        self.detail = detail


class StorageFailure(EventStoreError):
    """Operational, timeout, connection or unclassified constraint error."""


class DuplicateEventId(StorageFailure):
    """An event_id is already present in the stream."""


class DecodeFailed(EventStoreError):
    """A payload could not be decoded into a value for its event name.

    Attributes:
        event_name (str): The event name the registry was asked to decode.
        reason (str): Why decoding failed.
    """

    def __init__(self, event_name: str, reason: str):
        super().__init__(f"Cannot decode payload of '{event_name}': {reason}")
        self.event_name = event_name
        self.reason = reason


class CursorClosedError(EventStoreError):
    """The cursor was closed and cannot produce elements any more."""


class InvalidMatcherError(EventStoreError, ValueError):
    """A metadata matcher cannot be compiled into a SQL predicate."""


class InvalidDocumentError(EventStoreError, ValueError):
    """A document holds a key or value outside the permitted kinds."""
