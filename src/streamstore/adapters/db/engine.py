"""Database engine factory.

All engines used by STREAMSTORE should come from `make_engine` so that every
pooled connection is configured the same way:

- **SQLite**: enforces foreign keys, enables WAL, tunes durability and
  registers a ``regexp`` function so ``x REGEXP :pattern`` works in metadata
  filters.
- **PostgreSQL**: no tuning; pool options are passed through.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

SQLITE_NAMES = {"sqlite", "sqlite+pysqlite"}


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string corresponds to SQLite."""
    u = make_url(str(url))
    return u.get_backend_name() in SQLITE_NAMES


def sqlite_regexp(pattern: str | None, value: object) -> bool:
    """Implementation of SQLite's ``REGEXP`` operator (``value REGEXP pattern``).

    NULL on either side never matches; non-text values are matched against
    their string form.
    """
    if pattern is None or value is None:
        return False
    return re.search(pattern, str(value)) is not None


def make_engine(url: str | URL, *, echo: bool = False, **engine_kwargs: Any) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.
        **engine_kwargs: Passed through to :func:`sqlalchemy.create_engine`
            (e.g. ``pool_size``, ``connect_args``).

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """

    engine = create_engine(url, echo=echo, **engine_kwargs)

    if is_sqlite(url):

        @event.listens_for(engine, "connect")
        def _sqlite_setup(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore # pylint: disable=W0613
            dbapi_conn.create_function("regexp", 2, sqlite_regexp, deterministic=True)
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA synchronous=NORMAL;")
            cur.execute("PRAGMA temp_store=MEMORY;")
            cur.close()

    logger.debug("Engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine
