"""
In-memory event sink.
"""
from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


class InMemoryEventSink:
    """Keeps every event in arrival order (used for tests and debugging)."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def on_event(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[T]) -> list[T]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
