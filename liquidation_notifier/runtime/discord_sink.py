"""Discord channel notification sink (bot token, REST API)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from liquidation_notifier.core.domain.errors import NotificationError

LOGGER = logging.getLogger(__name__)

DISCORD_API_BASE: str = "https://discord.com/api/v10"
# Discord rejects message content above this length.
MAX_CONTENT_LENGTH: int = 2000


class DiscordChannelSink:
    """Posts each notification as a message to one Discord channel.

    One attempt per notification; failures raise NotificationError and are
    never retried here.
    """

    def __init__(
        self,
        token: str,
        channel_id: str,
        *,
        timeout_s: float = 10.0,
        session: Any = None,
        api_base: str = DISCORD_API_BASE,
    ) -> None:
        if not token:
            raise ValueError("token must be non-empty")
        if not channel_id:
            raise ValueError("channel_id must be non-empty")

        self._channel_id = channel_id
        self._timeout_s = timeout_s
        self._url = f"{api_base.rstrip('/')}/channels/{channel_id}/messages"
        self._session = session if session is not None else requests.Session()
        self._headers = {
            "Authorization": f"Bot {token}",
            "Content-Type": "application/json",
        }

    @property
    def url(self) -> str:
        return self._url

    def send(self, text: str) -> None:
        content = text if len(text) <= MAX_CONTENT_LENGTH else text[: MAX_CONTENT_LENGTH - 1] + "…"
        try:
            response = self._session.post(
                self._url,
                json={"content": content},
                headers=self._headers,
                timeout=self._timeout_s,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NotificationError(
                f"failed to send message to channel {self._channel_id}: {exc}"
            ) from exc

    def close(self) -> None:
        close_fn = getattr(self._session, "close", None)
        if callable(close_fn):
            close_fn()
