"""STREAMSTORE DB CLI.

``db install`` creates the registry tables (``event_streams`` and
``projections``); it is idempotent and never touches existing data.
``db status`` reports connectivity and what is installed.

Behavior
- Human-oriented notices go to **stderr**; data goes to **stdout**.
- Schema-changing actions prompt for confirmation unless ``--force`` is given.

Requirements
- ``STREAMSTORE_DB_URL`` must be set.
"""

from __future__ import annotations

from enum import Enum

import click
import click_extra as clickx
from sqlalchemy import func, inspect, select

from streamstore.adapters.eventstore import SqlAlchemyEventStore
from streamstore.adapters.eventstore.schema import event_streams, projections

from .helpers import open_engine, sanitize_url, success, warn
from .helpers.errors import event_store_errors

INSTALL_WARNING = (
    "This will create the STREAMSTORE registry tables if they are missing.\n"
    "Existing tables and data are left untouched."
)

INSTALL_INSTRUCTIONS = "Run 'streamstore db install' to create the registry tables."


class InstallStatus(Enum):
    """Whether the registry tables exist."""

    INSTALLED = "installed"
    PARTIAL = "partially installed"
    UNINITIALIZED = "uninitialized"


@click.group(cls=clickx.ExtraGroup)
def db() -> None:
    """Database management commands."""


@db.command()
@click.option("--force", is_flag=True, help="Install without confirmation.")
def install(force: bool) -> None:
    """Create the stream and projection registry tables."""
    engine = open_engine()
    if not force:
        warn(INSTALL_WARNING)
        click.secho(f"db: {click.style(sanitize_url(str(engine.url)), underline=True)}")
        click.confirm("Are you sure you want to proceed?", abort=True)
    with event_store_errors():
        SqlAlchemyEventStore(engine).install()
    success("Install complete!")


@db.command()
def status() -> None:
    """Show database connection and registry status."""
    engine = open_engine()
    success("Database reachable")
    click.echo(f"Backend : {engine.dialect.name}")
    click.echo(f"URL     : {sanitize_url(str(engine.url))}")

    counts: dict[str, int] = {}
    with engine.connect() as conn:
        inspector = inspect(conn)
        present = [
            inspector.has_table(table.name) for table in (event_streams, projections)
        ]
        if all(present):
            install_status = InstallStatus.INSTALLED
            for label, table in (("Streams", event_streams), ("Projections", projections)):
                counts[label] = conn.execute(
                    select(func.count()).select_from(table)
                ).scalar_one()
        elif any(present):
            install_status = InstallStatus.PARTIAL
        else:
            install_status = InstallStatus.UNINITIALIZED

    click.echo(f"Schema  : {install_status.value}")
    for label, count in counts.items():
        click.echo(f"{label:<8}: {count}")
    if install_status is not InstallStatus.INSTALLED:
        warn(INSTALL_INSTRUCTIONS)
