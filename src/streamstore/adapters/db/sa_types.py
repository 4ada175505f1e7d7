"""Custom SQLAlchemy types shared by STREAMSTORE tables.

`PORTABLE_JSONB` stores metadata, positions and state: JSONB on PostgreSQL so
it can be indexed and queried, plain JSON text elsewhere. `PORTABLE_JSON`
stores payloads, which are never queried.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, BigInteger, Integer
from sqlalchemy.dialects import sqlite
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import DateTime, TypeDecorator

from streamstore.adapters.db.dialects import DialectName

if TYPE_CHECKING:
    from sqlalchemy.engine.interfaces import Dialect

__all__ = [
    "BIGINT_PK",
    "PORTABLE_JSON",
    "PORTABLE_JSONB",
    "SQLITE_TIMESTAMP_FORMAT",
    "UTCDateTime",
]


BIGINT_PK = BigInteger().with_variant(Integer(), "sqlite")

PORTABLE_JSON = JSON(none_as_null=True)

PORTABLE_JSONB = JSON(none_as_null=True).with_variant(
    JSONB(none_as_null=True), "postgresql"
)

#: Fixed-width SQLite text; microseconds are always written so that text order
#: and time order agree.
SQLITE_TIMESTAMP_FORMAT = (
    "%(year)04d-%(month)02d-%(day)02d "
    "%(hour)02d:%(minute)02d:%(second)02d.%(microsecond)06d"
)


class UTCDateTime(TypeDecorator[datetime]):  # pylint: disable=too-many-ancestors
    """Timezone-aware UTC datetime for ``created_at`` and ``locked_until``.

    Merged reads sort rows from several stream tables by ``created_at`` in the
    database, so stored values must compare in time order on every backend.
    PostgreSQL keeps ``TIMESTAMP WITH TIME ZONE``. SQLite keeps naive UTC text
    in `SQLITE_TIMESTAMP_FORMAT`.

    Naive datetimes are taken as UTC; results are aware UTC datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> Any:
        if dialect.name == DialectName.SQLITE.value:
            return dialect.type_descriptor(
                sqlite.DATETIME(storage_format=SQLITE_TIMESTAMP_FORMAT)
            )
        return super().load_dialect_impl(dialect)

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return (
            value.replace(tzinfo=None)
            if dialect.name == DialectName.SQLITE.value
            else value
        )

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        return value

    def process_literal_param(self, value: datetime | None, dialect: Dialect) -> Any:
        return self.process_bind_param(value, dialect)

    @property
    def python_type(self) -> type[datetime]:
        return datetime
