from __future__ import annotations

import logging
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from liquidation_notifier.core.domain.drop_reasons import DropReason
from liquidation_notifier.core.events.events import (
    DedupPurgedEvent,
    EntryMalformedEvent,
    InsertSuppressedEvent,
    LiquidationConfirmedEvent,
    MessageIgnoredEvent,
    MessageMalformedEvent,
    NotificationFailedEvent,
    NotificationSentEvent,
    OrderClosedEvent,
    StoreFlushFailedEvent,
)

LOGGER = logging.getLogger(__name__)


class MetricsEventSink:
    """Event sink that maintains Prometheus counters for the reconciler.

    Metrics live in a private registry so several sinks (e.g. in tests) do not
    collide. Exposition is optional: call ``serve(port)`` to expose the
    registry over HTTP.

    Metrics are a side-effect only: the sink never raises into the bus for
    unknown event types.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.liquidations = Counter(
            "liquidations_confirmed",
            "Confirmed liquidations by symbol and side.",
            labelnames=["symbol", "side"],
            registry=self.registry,
        )
        self.dropped = Counter(
            "feed_input_dropped",
            "Feed input that was suppressed, ignored or skipped, by reason.",
            labelnames=["reason"],
            registry=self.registry,
        )
        self.orders_closed = Counter(
            "orders_closed",
            "Delete actions recorded in the dedup window.",
            registry=self.registry,
        )
        self.notifications = Counter(
            "notifications",
            "Notification delivery attempts by outcome.",
            labelnames=["outcome"],
            registry=self.registry,
        )
        self.store_flush_failures = Counter(
            "store_flush_failures",
            "Failed writes of the statistics store.",
            registry=self.registry,
        )
        self.dedup_entries = Gauge(
            "dedup_window_entries",
            "Order ids currently held in the dedup window.",
            registry=self.registry,
        )

    def on_event(self, event: Any) -> None:
        if isinstance(event, LiquidationConfirmedEvent):
            self.liquidations.labels(symbol=event.symbol, side=event.side).inc()
        elif isinstance(event, (InsertSuppressedEvent, MessageIgnoredEvent, MessageMalformedEvent)):
            self.dropped.labels(reason=event.reason).inc()
        elif isinstance(event, EntryMalformedEvent):
            self.dropped.labels(reason=DropReason.MALFORMED_ENTRY.value).inc()
        elif isinstance(event, OrderClosedEvent):
            self.orders_closed.inc()
            self.dedup_entries.set(event.window_size)
        elif isinstance(event, NotificationSentEvent):
            self.notifications.labels(outcome="sent").inc()
        elif isinstance(event, NotificationFailedEvent):
            self.notifications.labels(outcome="failed").inc()
        elif isinstance(event, StoreFlushFailedEvent):
            self.store_flush_failures.inc()
        elif isinstance(event, DedupPurgedEvent):
            self.dedup_entries.set(event.remaining)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Return the current value of a sample in this sink's registry."""
        return self.registry.get_sample_value(name, labels or {})

    def serve(self, port: int, addr: str = "0.0.0.0") -> None:
        start_http_server(port, addr=addr, registry=self.registry)
        LOGGER.info("Prometheus metrics exposed", extra={"port": port, "addr": addr})
