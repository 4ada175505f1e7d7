"""STREAMSTORE projections CLI.

Inspect and administer projection bookkeeping rows. Running projections is
the projector's job; these commands only read or rewrite what it persisted.
"""

from __future__ import annotations

import json

import click
import click_extra as clickx

from streamstore.adapters.eventstore import SqlAlchemyProjectionStore

from .helpers import open_engine, success, warn
from .helpers.errors import event_store_errors


def _store() -> SqlAlchemyProjectionStore:
    return SqlAlchemyProjectionStore(open_engine())


def _parse_state(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter,  # pylint: disable=unused-argument
    value: str,
) -> object:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}") from e


@click.group(cls=clickx.ExtraGroup)
def projections() -> None:
    """Projection management commands."""


@projections.command(name="list")
def list_() -> None:
    """List projections with their status."""
    store = _store()
    with event_store_errors():
        for name in store.list_names():
            click.echo(f"{name}\t{store.fetch_status(name).value}")


@projections.command()
@click.argument("name")
def status(name: str) -> None:
    """Show the status and stream positions of projection NAME."""
    store = _store()
    with event_store_errors():
        projection_status = store.fetch_status(name)
        position, _ = store.load(name)
    click.echo(f"Status  : {projection_status.value}")
    if not position:
        click.echo("Position: <none>")
    for stream_name, number in position.items():
        click.echo(f"Position: {stream_name} @ {number}")


@projections.command()
@click.argument("name")
@click.option(
    "--state",
    default="null",
    callback=_parse_state,
    show_default=True,
    help="Initial state to store, as JSON.",
)
@click.option("--force", is_flag=True, help="Reset without confirmation.")
def reset(name: str, state: object, force: bool) -> None:
    """Clear the positions of projection NAME so it replays from scratch."""
    store = _store()
    if not force:
        warn(f"Projection '{name}' will forget its positions and state.")
        click.confirm("Are you sure you want to proceed?", abort=True)
    with event_store_errors():
        store.reset(name, state)
    success(f"Projection '{name}' reset")


@projections.command()
@click.argument("name")
@click.option("--force", is_flag=True, help="Delete without confirmation.")
def delete(name: str, force: bool) -> None:
    """Delete the bookkeeping row of projection NAME."""
    store = _store()
    if not force:
        warn(f"This will permanently delete projection '{name}'.")
        click.confirm("Are you sure you want to proceed?", abort=True)
    with event_store_errors():
        store.delete(name)
    success(f"Projection '{name}' deleted")
