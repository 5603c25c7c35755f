"""Liquidation feed reconciliation.

The feed multiplexes tables; only ``liquidation`` messages are acted upon,
driven by their ``action``:

- partial: subscription snapshot of the current book. Ignored: the stream
  reports liquidations as they happen, not a replay of book state.
- delete:  the order was executed/closed. Its id enters the dedup window.
- update:  an amendment (size reduced, price changed). Ignored; amendments
  never re-trigger a notification.
- insert:  a new liquidation, unless the same order id was deleted within the
  suppression window. In that case the insert is the re-announcement half of a
  delete/insert pair (the engine re-listing at a better price) and is
  suppressed.

Suppression is a heuristic. Once the window has passed, an insert that reuses
an order id is reported as a new liquidation.

Notifications are produced only after the decorator has annotated the event,
the statistics store has been updated, and a flush has been attempted.
"""

# pylint: disable=too-many-arguments
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

from liquidation_notifier.core.domain.decoding import (
    DecodedMessage,
    EntryMalformed,
    MessageKind,
    decode_message,
)
from liquidation_notifier.core.domain.dedup_window import DEFAULT_SUPPRESSION_WINDOW_NS, DedupWindow
from liquidation_notifier.core.domain.drop_reasons import DropReason
from liquidation_notifier.core.domain.errors import FeedProtocolError
from liquidation_notifier.core.domain.statistics import decorate
from liquidation_notifier.core.events.events import (
    DedupPurgedEvent,
    EntryMalformedEvent,
    InsertSuppressedEvent,
    LiquidationConfirmedEvent,
    MessageIgnoredEvent,
    MessageMalformedEvent,
    OrderClosedEvent,
    StoreFlushFailedEvent,
)

if TYPE_CHECKING:
    from liquidation_notifier.core.domain.statistics import StatisticsStore
    from liquidation_notifier.core.domain.types import AnnotatedLiquidation
    from liquidation_notifier.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


class EventReconciler:
    """Turns feed messages into zero or more annotated liquidations.

    Owns the dedup window; the statistics store is injected. Messages must be
    processed one at a time in arrival order.
    """

    def __init__(
        self,
        store: StatisticsStore,
        event_bus: EventBus,
        *,
        dedup_window: DedupWindow | None = None,
        suppression_window_ns: int = DEFAULT_SUPPRESSION_WINDOW_NS,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._dedup = dedup_window if dedup_window is not None else DedupWindow(suppression_window_ns)
        self._clock = clock

        self.messages_processed: int = 0

    @property
    def store(self) -> StatisticsStore:
        return self._store

    @property
    def dedup_window(self) -> DedupWindow:
        return self._dedup

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def reconcile(self, messages: Iterable[Any]) -> Iterator[AnnotatedLiquidation]:
        """Lazily reconcile a message stream, stamping each message with the clock.

        Stops by raising FeedProtocolError if the feed reports an API error.
        """
        for message in messages:
            yield from self.process(message)

    def process(self, message: Any, now_ns: int | None = None) -> list[AnnotatedLiquidation]:
        """Reconcile one parsed feed message.

        Raises FeedProtocolError for a top-level ``error`` message. Malformed
        messages and entries are reported and skipped.
        """
        now = self._clock() if now_ns is None else now_ns
        self.messages_processed += 1

        # Bound the window on every step, whatever the message turns out to be.
        self._purge(now)

        LOGGER.debug("Feed message %r", message)

        decoded = decode_message(message)

        if decoded.kind is MessageKind.ERROR:
            raise FeedProtocolError(decoded.detail or "")

        if decoded.kind is MessageKind.IGNORED:
            self._event_bus.emit(
                MessageIgnoredEvent(
                    ts_ns_local=now,
                    table=decoded.table,
                    action=decoded.action,
                    reason=(decoded.drop_reason or DropReason.UNKNOWN_SHAPE).value,
                )
            )
            return []

        if decoded.kind is MessageKind.MALFORMED:
            self._event_bus.emit(
                MessageMalformedEvent(
                    ts_ns_local=now,
                    detail=decoded.detail or "",
                    reason=(decoded.drop_reason or DropReason.MALFORMED_MESSAGE).value,
                )
            )
            return []

        if decoded.action == "insert":
            return self._handle_insert(decoded, now)
        if decoded.action == "delete":
            self._handle_delete(decoded, now)
            return []

        reason = DropReason.PARTIAL_SNAPSHOT if decoded.action == "partial" else DropReason.ORDER_UPDATE
        self._event_bus.emit(
            MessageIgnoredEvent(
                ts_ns_local=now,
                table=decoded.table,
                action=decoded.action,
                reason=reason.value,
            )
        )
        return []

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _handle_delete(self, decoded: DecodedMessage, now: int) -> None:
        for entry in decoded.entries:
            if isinstance(entry, EntryMalformed):
                self._report_malformed(decoded, entry, now)
                continue

            order_id = entry.value.order_id
            self._dedup.mark_closed(order_id, now)
            self._event_bus.emit(
                OrderClosedEvent(ts_ns_local=now, order_id=order_id, window_size=len(self._dedup))
            )

    def _handle_insert(self, decoded: DecodedMessage, now: int) -> list[AnnotatedLiquidation]:
        out: list[AnnotatedLiquidation] = []

        for entry in decoded.entries:
            if isinstance(entry, EntryMalformed):
                self._report_malformed(decoded, entry, now)
                continue

            event = entry.value
            if self._dedup.is_recently_closed(event.order_id, now):
                self._event_bus.emit(
                    InsertSuppressedEvent(
                        ts_ns_local=now,
                        symbol=event.symbol,
                        order_id=event.order_id,
                        closed_at_ns_local=self._dedup.closed_at(event.order_id) or 0,
                        reason=DropReason.RECENTLY_CLOSED.value,
                    )
                )
                continue

            annotated = decorate(event, self._store)

            # One flush per confirmed liquidation; failures leave memory authoritative.
            if not self._store.flush():
                self._event_bus.emit(
                    StoreFlushFailedEvent(
                        ts_ns_local=now,
                        symbol=event.symbol,
                        order_id=event.order_id,
                    )
                )

            self._event_bus.emit(
                LiquidationConfirmedEvent(
                    ts_ns_local=now,
                    symbol=event.symbol,
                    order_id=event.order_id,
                    side=event.side,
                    price=event.price,
                    quantity=event.quantity,
                    sequence=annotated.sequence,
                    cumulative_quantity=annotated.cumulative_quantity,
                )
            )
            out.append(annotated)

        return out

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _purge(self, now: int) -> None:
        purged = self._dedup.purge(now)
        if purged:
            self._event_bus.emit(
                DedupPurgedEvent(ts_ns_local=now, purged=purged, remaining=len(self._dedup))
            )

    def _report_malformed(self, decoded: DecodedMessage, entry: EntryMalformed, now: int) -> None:
        self._event_bus.emit(
            EntryMalformedEvent(
                ts_ns_local=now,
                action=decoded.action or "",
                index=entry.index,
                reason=entry.reason,
            )
        )
