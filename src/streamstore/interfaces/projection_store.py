"""Projection bookkeeping port.

A projection is a named, checkpointed fold over one or more streams. The
projector that runs it is an external collaborator; this port only persists
its status, its per-stream positions and its opaque state between runs.

Contract overview
-----------------
- `create` inserts a row with an empty position map. A duplicate name is a
  plain `StorageFailure`; callers that care check `exists()` first.
- `fetch_status` / `load` raise `ProjectionNotFound` when no row matches.
- `update_status`, `reset`, `persist` and `delete` are single conditional
  statements; zero affected rows raises `ProjectionNotFound`.
- `reset` and `persist` always leave the status at `IDLE`.
- State and position are stored and returned verbatim.
- `locked_until` is part of the schema only; leasing is the caller's job.
"""

from __future__ import annotations

import abc
from enum import Enum
from typing import Any, TypeAlias

StreamPositions: TypeAlias = dict[str, int]


class ProjectionStatus(str, Enum):
    """Lifecycle status of a projection."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"


class ProjectionStore(abc.ABC):
    """Persistence for projection status, positions and state."""

    @abc.abstractmethod
    def create(
        self,
        name: str,
        state: Any,
        status: ProjectionStatus = ProjectionStatus.IDLE,
    ) -> None:
        """Insert a new projection row with an empty position map."""

    @abc.abstractmethod
    def exists(self, name: str) -> bool:
        """Whether a projection row with this name exists."""

    @abc.abstractmethod
    def fetch_status(self, name: str) -> ProjectionStatus:
        """Return the stored status.

        Raises:
            ProjectionNotFound: If no row matches.
        """

    @abc.abstractmethod
    def load(self, name: str) -> tuple[StreamPositions, Any]:
        """Return the stored ``(position, state)`` pair.

        Raises:
            ProjectionNotFound: If no row matches.
        """

    @abc.abstractmethod
    def update_status(self, name: str, status: ProjectionStatus) -> None:
        """Replace the status only.

        Raises:
            ProjectionNotFound: If no row matches.
        """

    @abc.abstractmethod
    def reset(self, name: str, state: Any) -> None:
        """Set status to IDLE, clear the positions and replace the state.

        Raises:
            ProjectionNotFound: If no row matches.
        """

    @abc.abstractmethod
    def persist(self, name: str, state: Any, position: StreamPositions) -> None:
        """Checkpoint: set status to IDLE and replace state and positions.

        Raises:
            ProjectionNotFound: If no row matches.
        """

    @abc.abstractmethod
    def delete(self, name: str) -> None:
        """Remove the projection row.

        Raises:
            ProjectionNotFound: If no row matches.
        """

    @abc.abstractmethod
    def list_names(self) -> list[str]:
        """Names of all projections, in creation order."""
