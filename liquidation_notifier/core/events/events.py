"""
Domain event models.

These events represent immutable facts observed while reconciling the
liquidation feed. They are consumed by loggers, recorders, and metrics sinks.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LiquidationConfirmedEvent:
    ts_ns_local: int
    symbol: str
    order_id: str

    side: str
    price: float
    quantity: int

    sequence: int
    cumulative_quantity: int


@dataclass(frozen=True, slots=True)
class InsertSuppressedEvent:
    ts_ns_local: int
    symbol: str
    order_id: str

    closed_at_ns_local: int
    reason: str


@dataclass(frozen=True, slots=True)
class OrderClosedEvent:
    ts_ns_local: int
    order_id: str
    window_size: int


@dataclass(frozen=True, slots=True)
class EntryMalformedEvent:
    ts_ns_local: int
    action: str
    index: int

    reason: str


@dataclass(frozen=True, slots=True)
class MessageMalformedEvent:
    ts_ns_local: int
    detail: str
    reason: str


@dataclass(frozen=True, slots=True)
class MessageIgnoredEvent:
    ts_ns_local: int
    table: str | None
    action: str | None
    reason: str


@dataclass(frozen=True, slots=True)
class DedupPurgedEvent:
    ts_ns_local: int
    purged: int
    remaining: int


@dataclass(frozen=True, slots=True)
class StoreFlushFailedEvent:
    ts_ns_local: int
    symbol: str
    order_id: str


@dataclass(frozen=True, slots=True)
class NotificationSentEvent:
    ts_ns_local: int
    symbol: str
    order_id: str


@dataclass(frozen=True, slots=True)
class NotificationFailedEvent:
    ts_ns_local: int
    symbol: str
    order_id: str

    error: str
