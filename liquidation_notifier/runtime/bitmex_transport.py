"""BitMEX realtime websocket transport for the liquidation table.

Subscribes via ``wss://<host>/realtime?subscribe=liquidation``. A heartbeat
thread sends ping frames every ``ping_interval_s``; the reader treats
``pong_wait_s`` without any inbound frame as a dead connection. Only the
heartbeat thread writes to the socket while reading is in progress, and it
does so under a write lock.

Reconnect is the caller's decision: any connection problem surfaces as
FeedTransportError.
"""

# pylint: disable=too-many-instance-attributes
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Iterator

import websocket
from websocket import (
    WebSocketConnectionClosedException,
    WebSocketException,
    WebSocketTimeoutException,
)

from liquidation_notifier.core.domain.errors import FeedDecodeError, FeedTransportError

LOGGER = logging.getLogger(__name__)


class BitmexFeedTransport:
    """Blocking websocket client yielding one parsed JSON value per frame."""

    def __init__(
        self,
        url: str,
        *,
        pong_wait_s: float = 60.0,
        ping_interval_s: float = 54.0,
        write_wait_s: float = 10.0,
        connect: Callable[..., Any] = websocket.create_connection,
    ) -> None:
        if ping_interval_s >= pong_wait_s:
            raise ValueError("ping_interval_s must be smaller than pong_wait_s")

        self.url = url
        self._pong_wait_s = pong_wait_s
        self._ping_interval_s = ping_interval_s
        self._write_wait_s = write_wait_s
        self._connect = connect

        self._ws: Any = None
        self._write_lock = threading.Lock()
        self._stop = threading.Event()
        self._heartbeat: threading.Thread | None = None

    # ---- Lifecycle ----
    def __enter__(self) -> BitmexFeedTransport:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def connect(self) -> None:
        if self._ws is not None:
            return
        try:
            # The socket timeout doubles as the read deadline.
            self._ws = self._connect(self.url, timeout=self._pong_wait_s)
        except (WebSocketException, OSError) as exc:
            raise FeedTransportError(f"could not connect to BitMex: {exc}") from exc

        LOGGER.info("Connected to BitMex: %s", self.url, extra={"url": self.url})

        self._stop.clear()
        self._heartbeat = threading.Thread(
            target=self._heartbeat_loop,
            name="bitmex-heartbeat",
            daemon=True,
        )
        self._heartbeat.start()

    def close(self) -> None:
        self._stop.set()
        ws, self._ws = self._ws, None
        if ws is not None:
            with self._write_lock:
                try:
                    ws.close(timeout=self._write_wait_s)
                except (WebSocketException, OSError) as exc:
                    LOGGER.debug("Error while closing websocket: %s", exc)

        heartbeat, self._heartbeat = self._heartbeat, None
        if heartbeat is not None and heartbeat is not threading.current_thread():
            heartbeat.join(timeout=self._write_wait_s)

    # ---- Reading ----
    def messages(self) -> Iterator[Any]:
        self.connect()
        while True:
            ws = self._ws
            if ws is None:
                raise FeedTransportError("connection closed")

            try:
                raw = ws.recv()
            except WebSocketTimeoutException as exc:
                raise FeedTransportError(
                    f"no frame received within {self._pong_wait_s}s"
                ) from exc
            except WebSocketConnectionClosedException as exc:
                raise FeedTransportError("connection closed by peer") from exc
            except (WebSocketException, OSError) as exc:
                raise FeedTransportError(f"read failed: {exc}") from exc

            if not raw:
                continue

            try:
                message = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise FeedDecodeError(f"frame is not valid JSON: {exc}") from exc

            yield message

    # ---- Heartbeat ----
    def _heartbeat_loop(self) -> None:
        while not self._stop.wait(self._ping_interval_s):
            ws = self._ws
            if ws is None:
                return
            with self._write_lock:
                try:
                    ws.ping()
                except (WebSocketException, OSError) as exc:
                    # The reader will notice the dead connection via its deadline.
                    LOGGER.warning("Ping failed, stopping heartbeat: %s", exc)
                    return
