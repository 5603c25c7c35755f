"""
Event sink interface.

Sinks consume the reconciliation events defined in ``events.py``.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume one reconciliation event."""
