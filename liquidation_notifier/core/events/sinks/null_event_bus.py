from __future__ import annotations

from typing import Any

from liquidation_notifier.core.events.event_bus import EventBus


class NullEventBus(EventBus):
    """EventBus without sinks: every reconciliation event is dropped (used for tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=())

    def emit(self, event: Any) -> None:
        return
