"""Read queries over stream tables.

`stream_query` selects one stream's events in sequence order; `merged_query`
unions several of them and orders the result by creation time. Both return
an `EventQuery`, which the cursor turns into one statement per page by
appending ``LIMIT``/``OFFSET``.

Every row carries the logical stream name it came from as an extra ``stream``
column. The name travels as a bound parameter like every other value, so
quotes, colons and percent signs in it never reach the statement text.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Integer, String, Uuid, bindparam, text
from sqlalchemy.dialects.postgresql import ARRAY

from streamstore.adapters.db.dialects import DialectName
from streamstore.adapters.db.sa_types import PORTABLE_JSON, PORTABLE_JSONB, UTCDateTime

from .naming import quote_identifier
from .query_compiler import compile_matcher

if TYPE_CHECKING:
    from sqlalchemy import TextClause
    from sqlalchemy.engine.interfaces import Dialect

    from streamstore.interfaces.matcher import MetadataMatcher

EVENT_COLUMNS = "no, event_id, event_name, payload, metadata, created_at"

MERGE_ORDER = "created_at ASC, stream ASC, no ASC"

RESULT_TYPES = {
    "no": Integer,
    "event_id": Uuid,
    "event_name": String,
    "payload": PORTABLE_JSON,
    "metadata": PORTABLE_JSONB,
    "created_at": UTCDateTime,
    "stream": String,
}


@dataclass(frozen=True, slots=True)
class EventQuery:
    """A compiled read statement without pagination.

    Attributes:
        sql: The statement text with ``:pN`` placeholders.
        parameters: Values by placeholder name.
        dialect: Backend the statement was rendered for.
    """

    sql: str
    parameters: dict[str, Any] = field(default_factory=dict)
    dialect: DialectName = DialectName.POSTGRES

    def page(self, limit: int, offset: int) -> TextClause:
        """The statement restricted to one page of rows."""
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be >= 0")
        stmt = text(f"{self.sql} LIMIT {int(limit)} OFFSET {int(offset)}")
        binds = [
            bindparam(name, value, type_=self._bind_type(value))
            for name, value in self.parameters.items()
        ]
        return stmt.bindparams(*binds).columns(**RESULT_TYPES)

    def _bind_type(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return UTCDateTime()
        if isinstance(value, uuid.UUID):
            return Uuid()
        if isinstance(value, list) and self.dialect is DialectName.POSTGRES:
            return ARRAY(String)
        return None


def _select_stream(
    stream_name: str,
    physical_name: str,
    from_number: int,
    matcher: MetadataMatcher,
    dialect: Dialect,
    param_offset: int,
) -> tuple[str, dict[str, Any], int]:
    compiled = compile_matcher(
        matcher, DialectName.from_string(dialect.name), param_offset
    )
    parameters = compiled.bind_names()
    from_placeholder = f"p{compiled.next_offset + 1}"
    stream_placeholder = f"p{compiled.next_offset + 2}"
    parameters[from_placeholder] = from_number
    parameters[stream_placeholder] = stream_name

    sql = (
        f"SELECT {EVENT_COLUMNS}, CAST(:{stream_placeholder} AS TEXT) AS stream"
        f" FROM {quote_identifier(physical_name)}"
        f" WHERE {compiled.sql} AND no >= :{from_placeholder}"
        " ORDER BY no ASC"
    )
    return sql, parameters, compiled.next_offset + 2


def stream_query(
    stream_name: str,
    physical_name: str,
    dialect: Dialect,
    from_number: int = 1,
    matcher: MetadataMatcher = (),
) -> EventQuery:
    """Select the events of one stream with ``no >= from_number``.

    Raises:
        InvalidMatcherError: If the matcher cannot be compiled.
        ValueError: If ``physical_name`` is not a physical table name.
    """
    sql, parameters, _ = _select_stream(
        stream_name, physical_name, from_number, matcher, dialect, 0
    )
    return EventQuery(sql, parameters, DialectName.from_string(dialect.name))


@dataclass(frozen=True, slots=True)
class StreamSelection:
    """One resolved stream of a merged read."""

    stream_name: str
    physical_name: str
    from_number: int = 1
    matcher: MetadataMatcher = ()


def merged_query(streams: Sequence[StreamSelection], dialect: Dialect) -> EventQuery:
    """Union several streams, ordered by creation time.

    Each sub-select keeps its own filter and lower bound; placeholder ranges do
    not overlap. Rows with equal ``created_at`` are ordered by stream name and
    then sequence number. A single stream yields the plain stream query.

    Raises:
        ValueError: If ``streams`` is empty.
        InvalidMatcherError: If any matcher cannot be compiled.
    """
    if not streams:
        raise ValueError("merged_query() needs at least one stream")

    if len(streams) == 1:
        only = streams[0]
        return stream_query(
            only.stream_name, only.physical_name, dialect, only.from_number, only.matcher
        )

    selects: list[str] = []
    parameters: dict[str, Any] = {}
    offset = 0
    for i, selection in enumerate(streams, start=1):
        sql, params, offset = _select_stream(
            selection.stream_name,
            selection.physical_name,
            selection.from_number,
            selection.matcher,
            dialect,
            offset,
        )
        selects.append(f"SELECT * FROM ({sql}) AS s{i}")
        parameters.update(params)

    sql = " UNION ALL ".join(selects) + f" ORDER BY {MERGE_ORDER}"
    return EventQuery(sql, parameters, DialectName.from_string(dialect.name))
