"""
Simple synchronous event bus.

Events are delivered in emission order on the caller's thread. A sink that
raises is logged and skipped so observability can never stall reconciliation.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from liquidation_notifier.core.events.event_sink import EventSink

LOGGER = logging.getLogger(__name__)


class EventBus:
    """Fans reconciliation events out to registered sinks."""

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    @property
    def sinks(self) -> tuple[EventSink, ...]:
        return tuple(self._sinks)

    def register(self, sink: EventSink) -> None:
        self._sinks.append(sink)

    def emit(self, event: Any) -> None:
        if self._closed:
            return
        for sink in self._sinks:
            try:
                sink.on_event(event)
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception(
                    "Event sink failed",
                    extra={"sink": type(sink).__name__, "event_type": type(event).__name__},
                )

    def close(self) -> None:
        """Close every sink exposing close(); later emits are discarded."""
        if self._closed:
            return

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()

        self._closed = True
