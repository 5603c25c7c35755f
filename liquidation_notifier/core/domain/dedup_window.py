"""Time-bounded set of recently closed order identifiers.

The liquidation engine may announce a single liquidation as a sequence of
insert / delete / insert cycles for the same order id while it looks for a
better price:

    insert ..... update ..... delete/insert ..... update ..... delete

("....." marks a possible delay.) Remembering when an order was last deleted
lets the reconciler recognise the re-insert half of a delete/insert pair.

Entries are purged explicitly via ``purge(now_ns)``; no background timer is
involved, so behaviour is fully determined by the timestamps passed in.
"""

from __future__ import annotations

DEFAULT_SUPPRESSION_WINDOW_NS: int = 10 * 1_000_000_000


class DedupWindow:
    """Maps order id -> local timestamp (ns) of the delete that closed it."""

    def __init__(self, max_age_ns: int = DEFAULT_SUPPRESSION_WINDOW_NS) -> None:
        if max_age_ns <= 0:
            raise ValueError("max_age_ns must be positive")
        self.max_age_ns = max_age_ns
        self._closed_at: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._closed_at)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._closed_at

    def closed_at(self, order_id: str) -> int | None:
        return self._closed_at.get(order_id)

    def mark_closed(self, order_id: str, now_ns: int) -> None:
        """Record (or refresh) the closing time of an order."""
        self._closed_at[order_id] = now_ns

    def is_recently_closed(self, order_id: str, now_ns: int) -> bool:
        """Return True if the order was closed no more than ``max_age_ns`` ago.

        The age bound is checked here as well, so the answer does not depend
        on when purge last ran.
        """
        closed_at = self._closed_at.get(order_id)
        if closed_at is None:
            return False
        return now_ns - closed_at <= self.max_age_ns

    def purge(self, now_ns: int) -> int:
        """Drop entries older than ``max_age_ns``. Returns the number removed."""
        expired = [
            order_id
            for order_id, closed_at in self._closed_at.items()
            if now_ns - closed_at > self.max_age_ns
        ]
        for order_id in expired:
            del self._closed_at[order_id]
        return len(expired)
