"""Structured documents stored alongside events.

Event metadata is a small, ordered key-value document. Keys are strings and
values are restricted to strings, numbers, booleans and nested documents so
that the query compiler can dispatch on a closed set of value kinds.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeAlias, Union

from .errors import InvalidDocumentError

DocumentValue: TypeAlias = Union[str, int, float, bool, "Document"]
Document: TypeAlias = dict[str, DocumentValue]

SCALAR_KINDS = (str, int, float, bool)


def validate_document(document: Mapping[str, object], *, path: str = "") -> None:
    """Check that a mapping only holds permitted keys and value kinds.

    Args:
        document: The mapping to validate.
        path: Dotted prefix used in error messages for nested documents.

    Raises:
        InvalidDocumentError: If a key is not a string or a value is not a
            string, number, boolean or nested document.
    """
    if not isinstance(document, Mapping):
        raise InvalidDocumentError(f"{path or 'document'} must be a mapping")

    for key, value in document.items():
        if not isinstance(key, str):
            raise InvalidDocumentError(f"document keys must be strings, got {key!r}")
        where = f"{path}.{key}" if path else key
        if isinstance(value, Mapping):
            validate_document(value, path=where)
        elif not isinstance(value, SCALAR_KINDS):
            raise InvalidDocumentError(
                f"{where}: unsupported value kind {type(value).__name__}"
            )


def as_document(document: Mapping[str, object] | None) -> Document:
    """Return a validated plain-dict copy of ``document`` (``{}`` for None)."""
    if document is None:
        return {}
    validate_document(document)
    return {
        key: as_document(value) if isinstance(value, Mapping) else value  # type: ignore[misc]
        for key, value in document.items()
    }
