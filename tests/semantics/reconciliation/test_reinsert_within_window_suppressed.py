"""
Semantic test: delete -> re-insert within the window is suppressed.

Invariant:
For insert(X) -> delete(X) -> insert(X) with the second insert inside the
suppression window, exactly one liquidation is confirmed (the first insert)
and the re-insert leaves the statistics store unchanged.
"""

from __future__ import annotations

from feed_builders import SECOND_NS, delete, insert

from liquidation_notifier.core.domain.drop_reasons import DropReason
from liquidation_notifier.core.events.events import InsertSuppressedEvent


def test_reinsert_after_delete_is_suppressed(reconciler, store, event_sink) -> None:
    first = reconciler.process(insert(order_id="A", price=100.0, leaves_qty=50), now_ns=1 * SECOND_NS)
    assert len(first) == 1
    assert first[0].event.order_id == "A"

    assert reconciler.process(delete(order_id="A"), now_ns=2 * SECOND_NS) == []

    stats_before = store.get("XBTUSD")
    again = reconciler.process(insert(order_id="A", price=98.0, leaves_qty=30), now_ns=5 * SECOND_NS)

    assert again == []
    assert store.get("XBTUSD") == stats_before

    suppressed = event_sink.of_type(InsertSuppressedEvent)
    assert len(suppressed) == 1
    assert suppressed[0].order_id == "A"
    assert suppressed[0].closed_at_ns_local == 2 * SECOND_NS
    assert suppressed[0].reason == DropReason.RECENTLY_CLOSED.value


def test_reinsert_exactly_at_window_edge_is_still_suppressed(reconciler) -> None:
    reconciler.process(delete(order_id="A"), now_ns=0)

    assert reconciler.process(insert(order_id="A"), now_ns=10 * SECOND_NS) == []


def test_repeated_delete_refreshes_window(reconciler) -> None:
    reconciler.process(delete(order_id="A"), now_ns=0)
    reconciler.process(delete(order_id="A"), now_ns=8 * SECOND_NS)

    # 15s after the first delete but only 7s after the second one.
    assert reconciler.process(insert(order_id="A"), now_ns=15 * SECOND_NS) == []


def test_other_order_ids_are_not_suppressed(reconciler) -> None:
    reconciler.process(delete(order_id="A"), now_ns=0)

    out = reconciler.process(insert(order_id="B"), now_ns=1 * SECOND_NS)

    assert [a.event.order_id for a in out] == ["B"]
