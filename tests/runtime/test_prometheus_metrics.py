"""Prometheus counters driven by reconciliation events."""

from __future__ import annotations

from feed_builders import SECOND_NS, delete, insert, liquidation_message

from liquidation_notifier.core.domain.reconciler import EventReconciler
from liquidation_notifier.core.domain.statistics import StatisticsStore
from liquidation_notifier.core.events.event_bus import EventBus
from liquidation_notifier.core.events.events import NotificationFailedEvent, NotificationSentEvent
from liquidation_notifier.runtime.prometheus_metrics import MetricsEventSink


def test_counters_follow_reconciliation() -> None:
    metrics = MetricsEventSink()
    bus = EventBus([metrics])
    reconciler = EventReconciler(StatisticsStore.in_memory(), bus)

    reconciler.process(insert(order_id="A", side="Buy"), now_ns=0)
    reconciler.process(delete(order_id="A"), now_ns=1 * SECOND_NS)
    reconciler.process(insert(order_id="A"), now_ns=2 * SECOND_NS)
    reconciler.process({"table": "trade", "action": "insert", "data": []}, now_ns=3 * SECOND_NS)
    reconciler.process(liquidation_message("insert", {"orderID": "bad"}), now_ns=4 * SECOND_NS)
    reconciler.process({"table": "trade", "action": "insert", "data": []}, now_ns=30 * SECOND_NS)

    assert metrics.sample("liquidations_confirmed_total", {"symbol": "XBTUSD", "side": "Buy"}) == 1.0
    assert metrics.sample("orders_closed_total") == 1.0
    assert metrics.sample("feed_input_dropped_total", {"reason": "recently_closed"}) == 1.0
    assert metrics.sample("feed_input_dropped_total", {"reason": "foreign_table"}) == 2.0
    assert metrics.sample("feed_input_dropped_total", {"reason": "malformed_entry"}) == 1.0
    assert metrics.sample("dedup_window_entries") == 0.0


def test_notification_outcomes() -> None:
    metrics = MetricsEventSink()

    metrics.on_event(NotificationSentEvent(ts_ns_local=1, symbol="XBTUSD", order_id="A"))
    metrics.on_event(NotificationSentEvent(ts_ns_local=2, symbol="XBTUSD", order_id="B"))
    metrics.on_event(NotificationFailedEvent(ts_ns_local=3, symbol="XBTUSD", order_id="C", error="x"))

    assert metrics.sample("notifications_total", {"outcome": "sent"}) == 2.0
    assert metrics.sample("notifications_total", {"outcome": "failed"}) == 1.0


def test_sinks_have_independent_registries() -> None:
    first, second = MetricsEventSink(), MetricsEventSink()
    first.orders_closed.inc()

    assert first.sample("orders_closed_total") == 1.0
    assert second.sample("orders_closed_total") == 0.0


def test_dedup_gauge_tracks_window_growth_and_purge() -> None:
    metrics = MetricsEventSink()
    reconciler = EventReconciler(StatisticsStore.in_memory(), EventBus([metrics]))

    for i, order_id in enumerate("ABCDE"):
        reconciler.process(delete(order_id=order_id), now_ns=i * SECOND_NS)

    assert len(reconciler.dedup_window) == 5
    assert metrics.sample("dedup_window_entries") == 5.0

    # A and B are older than the 10s window at t=11.5s.
    reconciler.process({"table": "trade", "action": "insert", "data": []}, now_ns=11 * SECOND_NS + SECOND_NS // 2)

    assert len(reconciler.dedup_window) == 3
    assert metrics.sample("dedup_window_entries") == 3.0
