from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, Sequence

from liquidation_notifier.core.domain.errors import (
    ConfigError,
    FeedProtocolError,
    FeedTransportError,
    StatisticsStoreError,
)
from liquidation_notifier.core.domain.reconciler import EventReconciler
from liquidation_notifier.core.domain.statistics import StatisticsStore
from liquidation_notifier.core.events.event_bus import EventBus
from liquidation_notifier.core.events.sinks.file_recorder import FileRecorderSink
from liquidation_notifier.core.events.sinks.sink_logging import LoggingEventSink
from liquidation_notifier.runtime.bitmex_transport import BitmexFeedTransport
from liquidation_notifier.runtime.config import BotConfig, load_config
from liquidation_notifier.runtime.discord_sink import DiscordChannelSink
from liquidation_notifier.runtime.pipeline import run_pipeline
from liquidation_notifier.runtime.prometheus_metrics import MetricsEventSink

LOGGER = logging.getLogger("liquidation_notifier")

EXIT_OK = 0
EXIT_FEED_FAILURE = 1
EXIT_STARTUP_FAILURE = 2

STOP_POLL_INTERVAL_S = 0.2

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s %(filename)s:%(lineno)d %(message)s"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_event_bus(cfg: BotConfig) -> EventBus:
    bus = EventBus([LoggingEventSink(logging.getLogger("liquidation_notifier.events"))])

    try:
        if cfg.event_log_path is not None:
            bus.register(FileRecorderSink(cfg.event_log_path))

        if cfg.metrics_port is not None:
            metrics = MetricsEventSink()
            metrics.serve(cfg.metrics_port)
            bus.register(metrics)
    except OSError:
        bus.close()
        raise

    return bus


def _stop_on_signal(stop_event: threading.Event) -> Callable[[int, object], None]:
    def handler(_signum: int, _frame: object) -> None:
        stop_event.set()

    return handler


def _close_when_stopped(
    stop_event: threading.Event,
    finished: threading.Event,
    transport: BitmexFeedTransport,
) -> None:
    # Closing the socket unblocks a reader waiting in recv().
    while not finished.is_set():
        if stop_event.wait(STOP_POLL_INTERVAL_S):
            transport.close()
            return


def run(cfg: BotConfig, stop_event: threading.Event | None = None) -> int:
    """Run one feed session. Returns the process exit code.

    Setting ``stop_event`` ends the session cleanly: the pipeline stops between
    messages and the transport is closed so a pending read returns.
    """
    try:
        store = StatisticsStore.load(cfg.state_path, recent_window=cfg.recent_window)
    except StatisticsStoreError as exc:
        LOGGER.error("Failed to load state: %s", exc)
        return EXIT_STARTUP_FAILURE

    try:
        event_bus = _build_event_bus(cfg)
    except OSError as exc:
        LOGGER.error("Failed to set up event outputs: %s", exc)
        return EXIT_STARTUP_FAILURE

    reconciler = EventReconciler(
        store,
        event_bus,
        suppression_window_ns=cfg.suppression_window_ns,
    )
    sink = DiscordChannelSink(
        cfg.discord_token.get_secret_value(),
        cfg.discord_channel,
        timeout_s=cfg.sink_timeout_s,
    )
    transport = BitmexFeedTransport(
        cfg.feed_url,
        pong_wait_s=cfg.pong_wait_s,
        ping_interval_s=cfg.ping_interval_s,
        write_wait_s=cfg.write_wait_s,
    )

    finished = threading.Event()
    if stop_event is not None:
        threading.Thread(
            target=_close_when_stopped,
            args=(stop_event, finished, transport),
            name="stop-watcher",
            daemon=True,
        ).start()

    def stop_requested() -> bool:
        return stop_event is not None and stop_event.is_set()

    try:
        with transport:
            summary = run_pipeline(
                transport.messages(),
                reconciler,
                sink,
                event_bus,
                stop_event=stop_event,
            )
    except FeedProtocolError as exc:
        LOGGER.error("Error: %s", exc)
        return EXIT_FEED_FAILURE
    except FeedTransportError as exc:
        if stop_requested():
            LOGGER.info("Shutdown requested")
            return EXIT_OK
        LOGGER.error("Error: %s", exc)
        return EXIT_FEED_FAILURE
    except KeyboardInterrupt:
        LOGGER.info("Shutdown requested")
        return EXIT_OK
    finally:
        finished.set()
        sink.close()
        event_bus.close()
        LOGGER.info(
            "Session ended",
            extra={
                "messages": reconciler.messages_processed,
                "symbols": len(store.symbols()),
            },
        )

    if summary.stopped_by_request or stop_requested():
        LOGGER.info("Shutdown requested")
        return EXIT_OK

    # The feed does not end on its own; reaching here means the server closed cleanly.
    LOGGER.error("Feed ended after %d messages", summary.messages)
    return EXIT_FEED_FAILURE


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Relay BitMEX liquidations to a Discord channel."
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the JSON config (default: $CONFIG or config.json).",
    )

    parser.add_argument(
        "--state-path",
        type=Path,
        default=None,
        help="Override the statistics state file from the config.",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG logs every feed message).",
    )

    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        LOGGER.error("Unable to load config: %s", exc)
        return EXIT_STARTUP_FAILURE

    if args.state_path is not None:
        cfg = cfg.model_copy(update={"state_path": args.state_path})

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, _stop_on_signal(stop_event))

    return run(cfg, stop_event)


if __name__ == "__main__":
    sys.exit(main())
