"""Feed -> reconciler -> notification sink loop."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

from liquidation_notifier.core.domain.errors import NotificationError
from liquidation_notifier.core.domain.formatting import render_notification
from liquidation_notifier.core.events.events import NotificationFailedEvent, NotificationSentEvent

if TYPE_CHECKING:
    from liquidation_notifier.core.domain.reconciler import EventReconciler
    from liquidation_notifier.core.domain.types import AnnotatedLiquidation
    from liquidation_notifier.core.events.event_bus import EventBus
    from liquidation_notifier.core.ports.notification_sink import NotificationSink

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineSummary:
    """Counters for one pipeline run."""

    messages: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0
    stopped_by_request: bool = False


def _until_stopped(
    messages: Iterable[Any],
    stop_event: threading.Event | None,
    summary: PipelineSummary,
) -> Iterator[Any]:
    for message in messages:
        if stop_event is not None and stop_event.is_set():
            summary.stopped_by_request = True
            return
        summary.messages += 1
        yield message


def deliver(
    annotated: AnnotatedLiquidation,
    sink: NotificationSink,
    event_bus: EventBus,
    now_ns: int,
) -> bool:
    """Render and send one notification. A failure is logged, never retried."""
    status = render_notification(annotated)
    try:
        sink.send(status)
    except NotificationError as exc:
        LOGGER.warning(
            "Failed to send message: %s",
            status,
            extra={"order_id": annotated.event.order_id, "error": str(exc)},
        )
        event_bus.emit(
            NotificationFailedEvent(
                ts_ns_local=now_ns,
                symbol=annotated.symbol,
                order_id=annotated.event.order_id,
                error=str(exc),
            )
        )
        return False

    LOGGER.info("Sent message: %s", status, extra={"order_id": annotated.event.order_id})
    event_bus.emit(
        NotificationSentEvent(
            ts_ns_local=now_ns,
            symbol=annotated.symbol,
            order_id=annotated.event.order_id,
        )
    )
    return True


def run_pipeline(
    messages: Iterable[Any],
    reconciler: EventReconciler,
    sink: NotificationSink,
    event_bus: EventBus,
    *,
    stop_event: threading.Event | None = None,
    clock: Callable[[], int] = time.monotonic_ns,
) -> PipelineSummary:
    """Drive the reconciler over ``messages`` until they end or a stop is requested.

    Transport and protocol errors propagate to the caller. The stop flag is
    checked between messages, so a notification is never cut in half.
    """
    summary = PipelineSummary()

    for annotated in reconciler.reconcile(_until_stopped(messages, stop_event, summary)):
        if deliver(annotated, sink, event_bus, clock()):
            summary.notifications_sent += 1
        else:
            summary.notifications_failed += 1

    return summary
