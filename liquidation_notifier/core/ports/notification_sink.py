from __future__ import annotations

from typing import Protocol


class NotificationSink(Protocol):
    """Delivers rendered notifications to a chat channel."""

    def send(self, text: str) -> None:
        """Send ``text`` once. Raises NotificationError on failure."""
