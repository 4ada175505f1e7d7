"""Supported database dialects and their SQL fragment renderings.

STREAMSTORE targets PostgreSQL in production and SQLite for development and
tests. Centralizing the names as an Enum keeps dialect checks type-safe, and
the rendering helpers below are the only place where the two backends' JSON,
array and regex syntax differ.

| Concern            | PostgreSQL                         | SQLite                                  |
|--------------------|------------------------------------|-----------------------------------------|
| JSON key as text   | ``metadata->>'key'``               | ``json_extract(metadata, '$."key"')``   |
| JSON key equals    | ``metadata->'key' = CAST(.. AS JSONB)`` | ``json_type(..) = 'true'``        |
| membership         | ``x = ANY(CAST(:p AS TEXT[]))``    | ``x IN (SELECT value FROM json_each(:p))`` |
| regex              | ``x ~ :p``                         | ``x REGEXP :p`` (see `engine.make_engine`) |

Callers are responsible for validating ``column`` and ``key`` before they are
spliced in; values always travel as bound parameters.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


class UnsupportedDialect(Exception):
    """Raised when an unsupported database dialect is encountered."""


class DialectName(str, Enum):
    """Enumeration of supported SQLAlchemy dialect names.

    Attributes:
        POSTGRES: PostgreSQL dialect (``"postgresql"``).
        SQLITE:   SQLite dialect (``"sqlite"``).
    """

    POSTGRES = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, dialect_str: str | None) -> DialectName:
        """Normalize an arbitrary dialect string to a DialectName.

        Accepts common aliases and driver-qualified names (e.g. 'postgres',
        'postgresql+psycopg', 'sqlite+pysqlite').

        Raises:
            UnsupportedDialect: if the dialect is not recognized.
        """
        raw = (dialect_str or "").strip().lower()
        base = raw.split("+", 1)[0]

        if base in {"postgres", "postgresql", "pg"}:
            return cls.POSTGRES
        if base == "sqlite":
            return cls.SQLITE

        raise UnsupportedDialect(f"Unsupported dialect: {dialect_str!r}")

    @classmethod
    def from_sqlalchemy(cls, obj: Engine | Connection) -> DialectName:
        """Extract the dialect from a SQLAlchemy Engine or Connection.

        Raises:
            UnsupportedDialect: if the object has no dialect or it is not supported.
        """
        try:
            name = obj.dialect.name
        except AttributeError as e:
            raise UnsupportedDialect(
                f"Object {type(obj).__name__} does not expose .dialect.name"
            ) from e
        return cls.from_string(name)

    # --- JSON access ---

    def json_text(self, column: str, key: str) -> str:
        """A document key extracted as a scalar (text on PostgreSQL)."""
        if self is DialectName.POSTGRES:
            return f"{column}->>'{key}'"
        return f"json_extract({column}, '$.\"{key}\"')"

    def json_equals_literal(self, column: str, key: str, value: bool) -> str:
        """Compare a document key against an inline boolean literal."""
        literal = "true" if value else "false"
        if self is DialectName.POSTGRES:
            return f"{column}->'{key}' = CAST('{literal}' AS JSONB)"
        # json_extract() yields 1 and 0 for booleans, which would match integers
        return f"json_type({column}, '$.\"{key}\"') = '{literal}'"

    # --- casts ---

    @property
    def integer_type(self) -> str:
        """SQL type name used for integer casts."""
        return "INTEGER"

    @property
    def float_type(self) -> str:
        """SQL type name used for floating point casts."""
        return "DOUBLE PRECISION" if self is DialectName.POSTGRES else "REAL"

    # --- membership and pattern tests ---

    def in_array(self, expression: str, placeholder: str, negate: bool = False) -> str:
        """Membership test of ``expression`` against an array parameter."""
        if self is DialectName.POSTGRES:
            if negate:
                return f"CAST({expression} AS TEXT) <> ALL(CAST({placeholder} AS TEXT[]))"
            return f"CAST({expression} AS TEXT) = ANY(CAST({placeholder} AS TEXT[]))"
        keyword = "NOT IN" if negate else "IN"
        return f"{expression} {keyword} (SELECT value FROM json_each({placeholder}))"

    def array_parameter(self, values: Sequence[Any]) -> Any:
        """Prepare a sequence for binding as the array of `in_array`."""
        if self is DialectName.POSTGRES:
            return [str(value) for value in values]
        return json.dumps(list(values))

    def regex_match(self, expression: str, placeholder: str) -> str:
        """Pattern-match test of ``expression`` against a regex parameter."""
        if self is DialectName.POSTGRES:
            return f"{expression} ~ {placeholder}"
        return f"{expression} REGEXP {placeholder}"
