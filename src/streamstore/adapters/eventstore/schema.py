"""Event store schema.

Two registry tables live on the shared registry metadata:

- ``event_streams``: one row per logical stream, mapping its name to the
  physical table holding its events.
- ``projections``: one row per projection, with its status, per-stream
  positions and opaque state.

Every stream gets its own append-only event table, named by
`naming.physical_table_name`. Its definition is built at runtime by
`stream_table` because both its name and the dialect-specific JSON
expressions of its constraints depend on the call site.

Constraints on a stream table (``<t>`` is the physical name):

| Constraint                          | Purpose                                 |
|-------------------------------------|-----------------------------------------|
| PK(no), identity                    | per-stream monotonic sequence           |
| UNIQUE(event_id)                    | event identity                          |
| CHECK ck_<t>_aggregate_type         | ``_aggregate_type`` present in metadata |
| CHECK ck_<t>_aggregate_id           | ``_aggregate_id`` present in metadata   |
| CHECK ck_<t>_aggregate_version      | ``_aggregate_version`` present          |
| UNIQUE INDEX uq_<t>_aggregate_version | optimistic concurrency                |
| INDEX ix_<t>_aggregate_no           | ordered per-aggregate replay            |
"""

from __future__ import annotations

from sqlalchemy import (
    CHAR,
    CheckConstraint,
    Column,
    Identity,
    Index,
    MetaData,
    String,
    Table,
    Uuid,
    text,
)

from streamstore.adapters.db.dialects import DialectName
from streamstore.adapters.db.metadata import NAMING_CONVENTION, metadata
from streamstore.adapters.db.sa_types import (
    BIGINT_PK,
    PORTABLE_JSON,
    PORTABLE_JSONB,
    UTCDateTime,
)
from streamstore.interfaces.events import (
    AGGREGATE_ID_KEY,
    AGGREGATE_TYPE_KEY,
    AGGREGATE_VERSION_KEY,
)

from .naming import PHYSICAL_NAME_LENGTH, is_physical_name

__all__ = [
    "event_streams",
    "projections",
    "stream_table",
    "concurrency_index_name",
]

REAL_STREAM_NAME_LENGTH = 150
EVENT_NAME_LENGTH = 100
PROJECTION_NAME_LENGTH = 150
PROJECTION_STATUS_LENGTH = 28

event_streams = Table(
    "event_streams",
    metadata,
    Column("no", BIGINT_PK, Identity(start=1), primary_key=True, nullable=False),
    Column(
        "real_stream_name",
        String(REAL_STREAM_NAME_LENGTH),
        nullable=False,
        unique=True,
        comment="Logical stream name as given by callers.",
    ),
    Column(
        "stream_name",
        CHAR(PHYSICAL_NAME_LENGTH),
        nullable=False,
        unique=True,
        comment="Physical table holding the stream's events.",
    ),
    Column("metadata", PORTABLE_JSONB, nullable=False),
    comment="Registry of logical streams and their physical tables.",
)

projections = Table(
    "projections",
    metadata,
    Column("no", BIGINT_PK, Identity(start=1), primary_key=True, nullable=False),
    Column("name", String(PROJECTION_NAME_LENGTH), nullable=False, unique=True),
    Column(
        "position",
        PORTABLE_JSONB,
        nullable=False,
        comment="Map of stream name to last consumed sequence number.",
    ),
    Column("state", PORTABLE_JSONB, nullable=True),
    Column("status", String(PROJECTION_STATUS_LENGTH), nullable=False),
    Column(
        "locked_until",
        UTCDateTime(),
        nullable=True,
        comment="Lease expiry; not interpreted by the store.",
    ),
    comment="Projection status, checkpoint positions and state.",
)


def concurrency_index_name(physical_name: str) -> str:
    """Name of the unique index guarding aggregate versions in a stream table."""
    return f"uq_{physical_name}_aggregate_version"


def replay_index_name(physical_name: str) -> str:
    """Name of the per-aggregate ordered replay index of a stream table."""
    return f"ix_{physical_name}_aggregate_no"


def _aggregate_key(dialect: DialectName, key: str) -> str:
    return f"({dialect.json_text('metadata', key)})"


def stream_table(physical_name: str, dialect: DialectName) -> Table:
    """Build the `Table` for one stream's events.

    Args:
        physical_name: Table name from `naming.physical_table_name`.
        dialect: Backend the DDL will run on; the aggregate constraints are
            JSON expressions whose syntax differs per backend.

    Raises:
        ValueError: If ``physical_name`` is not a physical table name.
    """
    if not is_physical_name(physical_name):
        raise ValueError(f"Not a physical table name: {physical_name!r}")

    aggregate_type = _aggregate_key(dialect, AGGREGATE_TYPE_KEY)
    aggregate_id = _aggregate_key(dialect, AGGREGATE_ID_KEY)
    aggregate_version = _aggregate_key(dialect, AGGREGATE_VERSION_KEY)

    return Table(
        physical_name,
        MetaData(naming_convention=NAMING_CONVENTION),
        Column("no", BIGINT_PK, Identity(start=1), primary_key=True, nullable=False),
        Column("event_id", Uuid(), nullable=False, unique=True),
        Column("event_name", String(EVENT_NAME_LENGTH), nullable=False),
        Column("payload", PORTABLE_JSON, nullable=False),
        Column("metadata", PORTABLE_JSONB, nullable=False),
        Column("created_at", UTCDateTime(), nullable=False),
        CheckConstraint(f"{aggregate_type} IS NOT NULL", name="aggregate_type"),
        CheckConstraint(f"{aggregate_id} IS NOT NULL", name="aggregate_id"),
        CheckConstraint(f"{aggregate_version} IS NOT NULL", name="aggregate_version"),
        Index(
            concurrency_index_name(physical_name),
            text(aggregate_type),
            text(aggregate_id),
            text(aggregate_version),
            unique=True,
        ),
        Index(
            replay_index_name(physical_name),
            text(aggregate_type),
            text(aggregate_id),
            "no",
        ),
    )
