"""Exception taxonomy.

Fatal conditions (transport, protocol, startup) are raised as exceptions and
surfaced to the caller. Recoverable conditions (malformed entries, sink and
flush failures) are logged and reported on the event bus instead.
"""

from __future__ import annotations


class LiquidationNotifierError(Exception):
    """Base class for all errors raised by this package."""


class FeedTransportError(LiquidationNotifierError):
    """Connection lost, handshake failure or read deadline exceeded."""


class FeedDecodeError(FeedTransportError):
    """A frame could not be decoded as JSON."""


class FeedProtocolError(LiquidationNotifierError):
    """The feed reported an API-level error (top-level ``error`` field)."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"error in API response: {detail}")
        self.detail = detail


class NotificationError(LiquidationNotifierError):
    """A notification could not be delivered to the sink."""


class StatisticsStoreError(LiquidationNotifierError):
    """The durable statistics state could not be loaded."""


class ConfigError(LiquidationNotifierError):
    """The configuration file is missing or invalid."""
