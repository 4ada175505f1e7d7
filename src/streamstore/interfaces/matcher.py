"""Metadata matchers used to filter stream reads.

A matcher is an ordered sequence of `MetadataMatch` predicates which are
conjoined when compiled. Each predicate targets either a key of the event's
metadata document or one of the event's own columns.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, TypeAlias
from uuid import UUID

from .errors import InvalidMatcherError


class FieldKind(str, Enum):
    """Where the matched field lives."""

    METADATA = "metadata"
    MESSAGE_PROPERTY = "message_property"


class Operator(str, Enum):
    """Comparison operators understood by the query compiler."""

    EQUALS = "="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_THAN_EQUALS = ">="
    LOWER_THAN = "<"
    LOWER_THAN_EQUALS = "<="
    IN = "in"
    NOT_IN = "nin"
    REGEX = "regex"

    @classmethod
    def parse(cls, value: Operator | str) -> Operator:
        """Convert a raw operator value into an `Operator`.

        Raises:
            InvalidMatcherError: If the value names no supported operator.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidMatcherError(f"Unsupported operator: {value!r}") from e


MatchValue: TypeAlias = (
    str | int | float | bool | datetime | UUID | Sequence[str | int | float]
)


@dataclass(frozen=True, slots=True)
class MetadataMatch:
    """One predicate of a metadata matcher."""

    field: str
    value: MatchValue
    operator: Operator = Operator.EQUALS
    kind: FieldKind = FieldKind.METADATA

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator.parse(self.operator))
        try:
            object.__setattr__(self, "kind", FieldKind(self.kind))
        except ValueError as e:
            raise InvalidMatcherError(f"Unsupported field kind: {self.kind!r}") from e


MetadataMatcher: TypeAlias = Sequence[MetadataMatch]


@dataclass(frozen=True, slots=True)
class LoadStreamParameter:
    """One stream of a merged read, with its own start and filter."""

    stream_name: str
    from_number: int = 1
    matcher: MetadataMatcher = field(default_factory=tuple)


def matcher_from(*matches: MetadataMatch | dict[str, Any]) -> tuple[MetadataMatch, ...]:
    """Build a matcher from `MetadataMatch` objects or plain keyword dicts."""
    return tuple(
        match if isinstance(match, MetadataMatch) else MetadataMatch(**match)
        for match in matches
    )
