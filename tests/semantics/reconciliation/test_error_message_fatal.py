"""
Semantic test: a top-level error terminates processing.

Invariant:
A message with an ``error`` field raises FeedProtocolError carrying the
error text; nothing is emitted for that message and the lazy stream stops.
"""

from __future__ import annotations

import pytest
from feed_builders import insert

from liquidation_notifier.core.domain.errors import FeedProtocolError
from liquidation_notifier.core.events.events import LiquidationConfirmedEvent


def test_error_message_raises(reconciler) -> None:
    with pytest.raises(FeedProtocolError) as excinfo:
        reconciler.process({"status": 400, "error": "Unknown table: liquidations"}, now_ns=0)

    assert excinfo.value.detail == "Unknown table: liquidations"
    assert "Unknown table" in str(excinfo.value)


def test_error_wins_over_table_payload(reconciler, store) -> None:
    message = {**insert(order_id="A"), "error": "rate limited"}

    with pytest.raises(FeedProtocolError):
        reconciler.process(message, now_ns=0)

    assert store.symbols() == []


def test_reconcile_stops_at_error(reconciler, event_sink) -> None:
    clock_values = iter(range(1, 100))
    reconciler._clock = lambda: next(clock_values)  # pylint: disable=protected-access

    messages = [
        insert(order_id="A"),
        {"error": "boom"},
        insert(order_id="B"),
    ]
    emitted = []

    with pytest.raises(FeedProtocolError):
        for annotated in reconciler.reconcile(messages):
            emitted.append(annotated.event.order_id)

    assert emitted == ["A"]
    assert [e.order_id for e in event_sink.of_type(LiquidationConfirmedEvent)] == ["A"]
