"""Port for the liquidation feed transport.

A transport owns the connection (dial, keep-alive, read deadline) and yields
one parsed JSON value per inbound frame, in arrival order. Reconnect policy
belongs to the caller.
"""
from __future__ import annotations

from typing import Any, Iterator, Protocol, runtime_checkable


@runtime_checkable
class FeedTransport(Protocol):
    def messages(self) -> Iterator[Any]:
        """Yield decoded JSON frames until the connection ends.

        Raises FeedTransportError on connection failure or read timeout.
        """

    def close(self) -> None:
        """Release the connection. Must be idempotent."""
