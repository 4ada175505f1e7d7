"""Explicit payload registry.

Maps event names to a decoder (stored document -> value) and an optional
encoder (value -> document). Dataclasses can be registered in one call: they
are encoded with `dataclasses.asdict` and rebuilt from their fields.

Example:
    ```python
    registry = PayloadRegistry()
    registry.register_dataclass(OrderPlaced)
    store = SqlAlchemyEventStore(engine, registry=registry)
    ```
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any

from streamstore.interfaces.errors import DecodeFailed
from streamstore.interfaces.type_registry import TypeRegistry

Decoder = Callable[[Any], Any]
Encoder = Callable[[Any], dict[str, Any]]


def _as_mapping(value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"expected a mapping, got {type(value).__name__}")
    return dict(value)


class PayloadRegistry(TypeRegistry):
    """Name-keyed payload encoders and decoders."""

    def __init__(self) -> None:
        self._decoders: dict[str, Decoder] = {}
        self._encoders: dict[str, Encoder] = {}

    def register(
        self, event_name: str, decoder: Decoder, encoder: Encoder | None = None
    ) -> None:
        """Register the codec of one event name, replacing any previous one.

        Without an encoder, payloads must already be mappings.
        """
        self._decoders[event_name] = decoder
        self._encoders[event_name] = encoder or _as_mapping

    def register_dataclass(self, cls: type, name: str | None = None) -> None:
        """Register a dataclass under ``name`` (defaults to the class name)."""
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} is not a dataclass")
        self.register(
            name or cls.__name__,
            decoder=lambda document: cls(**_as_mapping(document)),
            encoder=dataclasses.asdict,
        )

    def encode(self, event_name: str, value: Any) -> dict[str, Any]:
        if (encoder := self._encoders.get(event_name)) is None:
            raise DecodeFailed(event_name, "no encoder registered")
        try:
            return encoder(value)
        except (TypeError, ValueError) as e:
            raise DecodeFailed(event_name, str(e)) from e

    def decode(self, event_name: str, document: Any) -> Any:
        if (decoder := self._decoders.get(event_name)) is None:
            raise DecodeFailed(event_name, "no decoder registered")
        try:
            return decoder(document)
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeFailed(event_name, str(e)) from e

    def __contains__(self, event_name: object) -> bool:
        return event_name in self._decoders
