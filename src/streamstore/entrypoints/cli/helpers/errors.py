"""Mapping of event store errors to CLI failures."""

from collections.abc import Iterator
from contextlib import contextmanager

import click

from streamstore.interfaces.errors import EventStoreError


@contextmanager
def event_store_errors() -> Iterator[None]:
    """Re-raise event store errors as `click.ClickException` (exit code 1)."""
    try:
        yield
    except EventStoreError as e:
        raise click.ClickException(str(e)) from e
