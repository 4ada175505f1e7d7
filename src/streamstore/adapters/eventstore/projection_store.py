"""SQLAlchemy-backed ProjectionStore for STREAMSTORE.

Each operation runs as a single statement in its own transaction. Writes that
target a missing projection affect zero rows and raise `ProjectionNotFound`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update

from streamstore.adapters.db.errors import storage_errors
from streamstore.interfaces.errors import ProjectionNotFound
from streamstore.interfaces.projection_store import (
    ProjectionStatus,
    ProjectionStore,
    StreamPositions,
)

from .schema import projections

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.sql.dml import Update

logger = logging.getLogger(__name__)


class SqlAlchemyProjectionStore(ProjectionStore):
    """ProjectionStore backed by the ``projections`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    # --- writes ---

    def create(
        self,
        name: str,
        state: Any,
        status: ProjectionStatus = ProjectionStatus.IDLE,
    ) -> None:
        with storage_errors(), self.engine.begin() as conn:
            conn.execute(
                insert(projections).values(
                    name=name,
                    position={},
                    state=state,
                    status=ProjectionStatus(status).value,
                )
            )
        logger.debug("Created projection %r (%s)", name, ProjectionStatus(status).value)

    def update_status(self, name: str, status: ProjectionStatus) -> None:
        self._update(name, status=ProjectionStatus(status).value)
        logger.debug("Projection %r is now %s", name, ProjectionStatus(status).value)

    def reset(self, name: str, state: Any) -> None:
        self._update(
            name, status=ProjectionStatus.IDLE.value, position={}, state=state
        )
        logger.debug("Reset projection %r", name)

    def persist(self, name: str, state: Any, position: StreamPositions) -> None:
        self._update(
            name,
            status=ProjectionStatus.IDLE.value,
            position=dict(position),
            state=state,
        )
        logger.debug("Persisted projection %r at %s", name, position)

    def delete(self, name: str) -> None:
        with storage_errors(), self.engine.begin() as conn:
            result = conn.execute(delete(projections).where(projections.c.name == name))
            if result.rowcount == 0:
                raise ProjectionNotFound(name)
        logger.debug("Deleted projection %r", name)

    # --- reads ---

    def exists(self, name: str) -> bool:
        stmt = select(projections.c.no).where(projections.c.name == name)
        with storage_errors(), self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def fetch_status(self, name: str) -> ProjectionStatus:
        stmt = select(projections.c.status).where(projections.c.name == name)
        with storage_errors(), self.engine.connect() as conn:
            status = conn.execute(stmt).scalar_one_or_none()
        if status is None:
            raise ProjectionNotFound(name)
        return ProjectionStatus(status)

    def load(self, name: str) -> tuple[StreamPositions, Any]:
        stmt = select(projections.c.position, projections.c.state).where(
            projections.c.name == name
        )
        with storage_errors(), self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        if row is None:
            raise ProjectionNotFound(name)
        return dict(row.position or {}), row.state

    def list_names(self) -> list[str]:
        stmt = select(projections.c.name).order_by(projections.c.no.asc())
        with storage_errors(), self.engine.connect() as conn:
            return list(conn.execute(stmt).scalars())

    # --- internals ---

    def _update(self, name: str, **values: Any) -> None:
        stmt: Update = (
            update(projections).where(projections.c.name == name).values(**values)
        )
        with storage_errors(), self.engine.begin() as conn:
            if conn.execute(stmt).rowcount == 0:
                raise ProjectionNotFound(name)
