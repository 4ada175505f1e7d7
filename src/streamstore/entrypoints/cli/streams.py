"""STREAMSTORE streams CLI.

Commands to list, create, delete and inspect streams. ``streams show`` writes
one JSON document per event to **stdout** so it can be piped into tools such
as ``jq``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click
import click_extra as clickx

from streamstore.adapters.eventstore import SqlAlchemyEventStore
from streamstore.config import get_page_size

from .helpers import open_engine, success, warn
from .helpers.errors import event_store_errors

if TYPE_CHECKING:
    from streamstore.interfaces.events import DomainEvent


def _store() -> SqlAlchemyEventStore:
    try:
        page_size = get_page_size()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return SqlAlchemyEventStore(open_engine(), page_size=page_size)


def event_as_json(event: DomainEvent) -> str:
    """Render an event as a single JSON line."""
    document: dict[str, Any] = {
        "stream": event.stream_name,
        "no": event.no,
        "event_id": str(event.event_id),
        "event_name": event.name,
        "created_at": event.created_at.isoformat(),
        "metadata": event.metadata,
        "payload": event.payload,
    }
    return json.dumps(document, default=str, sort_keys=False)


@click.group(cls=clickx.ExtraGroup)
def streams() -> None:
    """Stream management commands."""


@streams.command(name="list")
def list_() -> None:
    """List registered streams in registration order."""
    with event_store_errors():
        names = _store().fetch_stream_names()
    for name in names:
        click.echo(name)


@streams.command()
@click.argument("name")
def create(name: str) -> None:
    """Register stream NAME and create its table."""
    with event_store_errors():
        _store().create_stream(name)
    success(f"Stream '{name}' created")


@streams.command()
@click.argument("name")
@click.option("--force", is_flag=True, help="Delete without confirmation.")
def delete(name: str, force: bool) -> None:
    """Unregister stream NAME and drop its table with all its events."""
    store = _store()
    if not force:
        warn(f"This will permanently delete stream '{name}' and all its events.")
        click.confirm("Are you sure you want to proceed?", abort=True)
    with event_store_errors():
        store.delete_stream(name)
    success(f"Stream '{name}' deleted")


@streams.command()
@click.argument("name")
@click.option(
    "--from",
    "from_number",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="First sequence number to show.",
)
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Maximum number of events to show (0 for all).",
)
def show(name: str, from_number: int, limit: int) -> None:
    """Print the events of stream NAME as JSON lines."""
    with event_store_errors():
        with _store().load(name, from_number=from_number, count=limit) as cursor:
            for event in cursor:
                click.echo(event_as_json(event))
