"""Compile metadata matchers into SQL predicates.

A matcher is compiled into a list of SQL clause strings (to be joined with
``AND``) and the list of values bound to their placeholders. Placeholders are
named ``:p1``, ``:p2``, ... starting after ``param_offset`` so that several
compiled filters can share one statement.

Rules:

- Field names are spliced into SQL and are therefore validated: metadata keys
  must match ``[A-Za-z0-9_-]+`` and message properties must be one of the
  event table's columns.
- Booleans are rendered inline; every other value is bound.
- Integer metadata values compare as ``INTEGER``, floats as the dialect's
  floating point type, everything else as text.
- ``in`` / ``nin`` take a sequence and compile to an array membership test.
- ``regex`` takes a pattern string.
- An empty matcher compiles to the always-true ``1 = 1``.

The ``no >= from_number`` lower bound is not part of a matcher; the read path
adds it.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from streamstore.adapters.db.dialects import DialectName
from streamstore.interfaces.errors import InvalidMatcherError
from streamstore.interfaces.matcher import (
    FieldKind,
    MatchValue,
    MetadataMatch,
    MetadataMatcher,
    Operator,
)

METADATA_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")

MESSAGE_PROPERTIES = frozenset({"no", "event_id", "event_name", "created_at"})

ALWAYS_TRUE = "1 = 1"

COMPARISON_OPERATORS = frozenset(
    {
        Operator.EQUALS,
        Operator.NOT_EQUALS,
        Operator.GREATER_THAN,
        Operator.GREATER_THAN_EQUALS,
        Operator.LOWER_THAN,
        Operator.LOWER_THAN_EQUALS,
    }
)


@dataclass(frozen=True, slots=True)
class CompiledFilter:
    """SQL clauses of a compiled matcher with their bound values.

    Attributes:
        clauses: Predicates to be conjoined.
        parameters: Values for ``:p{param_offset + 1}`` onwards, in order.
        param_offset: Number of placeholders used before this filter.
    """

    clauses: list[str]
    parameters: list[Any] = field(default_factory=list)
    param_offset: int = 0

    @property
    def sql(self) -> str:
        """The clauses joined into one predicate."""
        return " AND ".join(self.clauses) if self.clauses else ALWAYS_TRUE

    @property
    def next_offset(self) -> int:
        """Offset for the next filter sharing the same statement."""
        return self.param_offset + len(self.parameters)

    def bind_names(self) -> dict[str, Any]:
        """Placeholder names mapped to their values."""
        return {
            f"p{self.param_offset + i}": value
            for i, value in enumerate(self.parameters, start=1)
        }


def compile_matcher(
    matcher: MetadataMatcher, dialect: DialectName, param_offset: int = 0
) -> CompiledFilter:
    """Compile a matcher for the given dialect.

    Args:
        matcher: Predicates to conjoin; may be empty.
        dialect: Backend whose SQL syntax to render.
        param_offset: Placeholders already used by the enclosing statement.

    Returns:
        CompiledFilter: The clauses and their bound values.

    Raises:
        InvalidMatcherError: For unsafe field names or values that do not fit
            the operator.
    """
    if not matcher:
        return CompiledFilter([ALWAYS_TRUE], [], param_offset)

    compiler = _MatcherCompiler(dialect, param_offset)
    clauses = [compiler.compile(match) for match in matcher]
    return CompiledFilter(clauses, compiler.parameters, param_offset)


class _MatcherCompiler:
    def __init__(self, dialect: DialectName, param_offset: int):
        self.dialect = dialect
        self.param_offset = param_offset
        self.parameters: list[Any] = []

    def _bind(self, value: Any) -> str:
        self.parameters.append(value)
        return f":p{self.param_offset + len(self.parameters)}"

    def compile(self, match: MetadataMatch) -> str:
        if match.kind is FieldKind.METADATA:
            return self._compile_metadata(match)
        return self._compile_property(match)

    # --- metadata document keys ---

    def _compile_metadata(self, match: MetadataMatch) -> str:
        key = match.field
        if not METADATA_KEY_RE.fullmatch(key):
            raise InvalidMatcherError(f"Invalid metadata key: {key!r}")

        op, value = match.operator, match.value
        expression = self.dialect.json_text("metadata", key)

        if op in (Operator.IN, Operator.NOT_IN):
            values = _sequence_value(match)
            return self.dialect.in_array(
                expression,
                self._bind(self.dialect.array_parameter(values)),
                negate=op is Operator.NOT_IN,
            )

        if op is Operator.REGEX:
            return self.dialect.regex_match(expression, self._bind(_pattern(match)))

        _scalar_value(match)
        if isinstance(value, bool):
            if op not in (Operator.EQUALS, Operator.NOT_EQUALS):
                raise InvalidMatcherError(
                    f"Operator {op.value!r} is not supported for booleans"
                )
            clause = self.dialect.json_equals_literal("metadata", key, value)
            return clause if op is Operator.EQUALS else f"NOT ({clause})"

        if isinstance(value, int):
            expression = f"CAST({expression} AS {self.dialect.integer_type})"
        elif isinstance(value, float):
            expression = f"CAST({expression} AS {self.dialect.float_type})"
        else:
            value = _as_text(value)

        return f"{expression} {op.value} {self._bind(value)}"

    # --- event table columns ---

    def _compile_property(self, match: MetadataMatch) -> str:
        column = match.field
        if column not in MESSAGE_PROPERTIES:
            raise InvalidMatcherError(f"Unknown message property: {column!r}")

        op, value = match.operator, match.value

        if op in (Operator.IN, Operator.NOT_IN):
            values = _sequence_value(match)
            if column == "event_id":
                values = [self._uuid_text(v) for v in values]
            return self.dialect.in_array(
                column,
                self._bind(self.dialect.array_parameter(values)),
                negate=op is Operator.NOT_IN,
            )

        if op is Operator.REGEX:
            return self.dialect.regex_match(
                f"CAST({column} AS TEXT)", self._bind(_pattern(match))
            )

        _scalar_value(match)
        if isinstance(value, bool):
            raise InvalidMatcherError(
                f"Message property {column!r} cannot be compared to a boolean"
            )
        if column == "event_id":
            value = _as_uuid(value)
        elif column == "created_at" and not isinstance(value, datetime):
            raise InvalidMatcherError("created_at must be compared to a datetime")

        return f"{column} {op.value} {self._bind(value)}"

    def _uuid_text(self, value: Any) -> str:
        parsed = _as_uuid(value)
        # Uuid columns are stored as 32 hex digits on SQLite
        return str(parsed) if self.dialect is DialectName.POSTGRES else parsed.hex


def _scalar_value(match: MetadataMatch) -> None:
    if match.operator not in COMPARISON_OPERATORS:
        raise InvalidMatcherError(f"Unsupported operator: {match.operator!r}")
    if not isinstance(match.value, (str, int, float, bool, datetime, uuid.UUID)):
        raise InvalidMatcherError(
            f"Operator {match.operator.value!r} needs a scalar value for"
            f" {match.field!r}, got {type(match.value).__name__}"
        )


def _sequence_value(match: MetadataMatch) -> list[MatchValue]:
    value = match.value
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidMatcherError(
            f"Operator {match.operator.value!r} needs a sequence for {match.field!r}"
        )
    return list(value)


def _pattern(match: MetadataMatch) -> str:
    if not isinstance(match.value, str):
        raise InvalidMatcherError(f"regex needs a pattern string for {match.field!r}")
    try:
        re.compile(match.value)
    except re.error as e:
        raise InvalidMatcherError(f"Invalid pattern for {match.field!r}: {e}") from e
    return match.value


def _as_text(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _as_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise InvalidMatcherError(f"Not a UUID: {value!r}") from e
