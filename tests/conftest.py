"""Shared fixtures for reconciler tests.

Timestamps are plain integers (ns, local axis) passed explicitly to
``EventReconciler.process`` so every test is deterministic.
"""

from __future__ import annotations

import pytest
from feed_builders import SECOND_NS

from liquidation_notifier.core.domain.reconciler import EventReconciler
from liquidation_notifier.core.domain.statistics import StatisticsStore
from liquidation_notifier.core.events.event_bus import EventBus
from liquidation_notifier.core.events.sinks.memory_sink import InMemoryEventSink


@pytest.fixture
def event_sink() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def store() -> StatisticsStore:
    return StatisticsStore.in_memory()


@pytest.fixture
def reconciler(store: StatisticsStore, event_sink: InMemoryEventSink) -> EventReconciler:
    return EventReconciler(store, EventBus([event_sink]), suppression_window_ns=10 * SECOND_NS)
