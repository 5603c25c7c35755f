"""
Logging event sink.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any

from liquidation_notifier.core.events.events import (
    DedupPurgedEvent,
    EntryMalformedEvent,
    MessageIgnoredEvent,
    MessageMalformedEvent,
    NotificationFailedEvent,
    NotificationSentEvent,
    OrderClosedEvent,
    StoreFlushFailedEvent,
)

_WARNING_EVENTS = (EntryMalformedEvent, MessageMalformedEvent, StoreFlushFailedEvent)
# Delivery outcomes are already logged with the rendered text by the pipeline.
_DEBUG_EVENTS = (
    DedupPurgedEvent,
    MessageIgnoredEvent,
    NotificationFailedEvent,
    NotificationSentEvent,
    OrderClosedEvent,
)


class LoggingEventSink:
    """Logs one structured line per reconciliation event.

    Failures and malformed input log at WARNING, high-volume bookkeeping at
    DEBUG, everything else at INFO.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @staticmethod
    def _level_for(event: Any) -> int:
        if isinstance(event, _WARNING_EVENTS):
            return logging.WARNING
        if isinstance(event, _DEBUG_EVENTS):
            return logging.DEBUG
        return logging.INFO

    def on_event(self, event: Any) -> None:
        level = self._level_for(event)
        if not self._logger.isEnabledFor(level):
            return

        fields = dataclasses.asdict(event) if dataclasses.is_dataclass(event) else {}
        rendered = " ".join(f"{k}={v!r}" for k, v in fields.items())
        self._logger.log(
            level,
            "%s %s",
            type(event).__name__,
            rendered,
            extra={"event": event},
        )
