"""Logical stream name to physical table name mapping.

Stream names are arbitrary user text; table names must be safe identifiers of
bounded length. A stream's table is named after the SHA-1 of its logical name:

    physical_table_name("orders") == "_" + sha1(b"orders").hexdigest()

The result is always 41 characters (``_`` followed by 40 lowercase hex
digits), which keeps the name valid on every supported backend and leaves room
for the constraint and index names derived from it.
"""

from __future__ import annotations

import hashlib
import re

PHYSICAL_NAME_RE = re.compile(r"^_[0-9a-f]{40}$")

PHYSICAL_NAME_LENGTH = 41


def physical_table_name(logical_name: str) -> str:
    """Return the physical table name for a logical stream name."""
    return "_" + hashlib.sha1(logical_name.encode("utf-8")).hexdigest()


def is_physical_name(name: str) -> bool:
    """Whether ``name`` has the shape produced by `physical_table_name`."""
    return PHYSICAL_NAME_RE.fullmatch(name) is not None


def quote_identifier(name: str) -> str:
    """Validate a physical table name and return it double-quoted.

    Raises:
        ValueError: If ``name`` is not a physical table name.
    """
    if not is_physical_name(name):
        raise ValueError(f"Not a physical table name: {name!r}")
    return f'"{name}"'
