"""Payload registry port.

The event store never interprets payloads. On append it asks a `TypeRegistry`
to turn an event's payload into a JSON document; on read it asks the registry
to turn the stored document back into a value, keyed by the event name.
"""

from __future__ import annotations

import abc
from typing import Any


class TypeRegistry(abc.ABC):
    """Maps event names to payload encoders and decoders."""

    @abc.abstractmethod
    def encode(self, event_name: str, value: Any) -> dict[str, Any]:
        """Turn a payload value into a JSON-serializable document.

        Raises:
            DecodeFailed: If no encoder is known for ``event_name`` or the
                value does not fit it.
        """

    @abc.abstractmethod
    def decode(self, event_name: str, document: Any) -> Any:
        """Turn a stored payload document into a value.

        Raises:
            DecodeFailed: If ``event_name`` is not registered or the document
                does not fit the registered shape.
        """

    @abc.abstractmethod
    def __contains__(self, event_name: object) -> bool:
        """Whether an event name is registered."""
