"""Reasons attached to dropped, suppressed or skipped feed input."""

from __future__ import annotations

from enum import Enum


class DropReason(str, Enum):
    RECENTLY_CLOSED = "recently_closed"
    MALFORMED_ENTRY = "malformed_entry"
    MALFORMED_MESSAGE = "malformed_message"
    FOREIGN_TABLE = "foreign_table"
    UNKNOWN_SHAPE = "unknown_shape"
    PARTIAL_SNAPSHOT = "partial_snapshot"
    ORDER_UPDATE = "order_update"
