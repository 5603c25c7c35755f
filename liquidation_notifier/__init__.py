"""Public API for the liquidation_notifier package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Reconciliation core
# ----------------------------------------------------------------------
from liquidation_notifier.core.domain.decoding import DecodedMessage, MessageKind, decode_message
from liquidation_notifier.core.domain.dedup_window import DEFAULT_SUPPRESSION_WINDOW_NS, DedupWindow
from liquidation_notifier.core.domain.drop_reasons import DropReason
from liquidation_notifier.core.domain.errors import (
    ConfigError,
    FeedDecodeError,
    FeedProtocolError,
    FeedTransportError,
    LiquidationNotifierError,
    NotificationError,
    StatisticsStoreError,
)
from liquidation_notifier.core.domain.formatting import render_notification
from liquidation_notifier.core.domain.reconciler import EventReconciler
from liquidation_notifier.core.domain.statistics import StatisticsStore, SymbolStats, decorate

# ----------------------------------------------------------------------
# Domain types
# ----------------------------------------------------------------------
from liquidation_notifier.core.domain.types import AnnotatedLiquidation, LiquidationEvent, Side

# ----------------------------------------------------------------------
# Events and ports
# ----------------------------------------------------------------------
from liquidation_notifier.core.events.event_bus import EventBus
from liquidation_notifier.core.ports.feed_transport import FeedTransport
from liquidation_notifier.core.ports.notification_sink import NotificationSink

# ----------------------------------------------------------------------
# Runtime
# ----------------------------------------------------------------------
from liquidation_notifier.runtime.config import BotConfig, load_config
from liquidation_notifier.runtime.pipeline import PipelineSummary, run_pipeline

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Core
    "EventReconciler",
    "DedupWindow",
    "DEFAULT_SUPPRESSION_WINDOW_NS",
    "StatisticsStore",
    "SymbolStats",
    "decorate",
    "render_notification",
    "decode_message",
    "DecodedMessage",
    "MessageKind",
    "DropReason",

    # Domain types
    "LiquidationEvent",
    "AnnotatedLiquidation",
    "Side",

    # Events and ports
    "EventBus",
    "FeedTransport",
    "NotificationSink",

    # Runtime
    "BotConfig",
    "load_config",
    "run_pipeline",
    "PipelineSummary",

    # Errors
    "LiquidationNotifierError",
    "FeedTransportError",
    "FeedDecodeError",
    "FeedProtocolError",
    "NotificationError",
    "StatisticsStoreError",
    "ConfigError",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("liquidation-notifier")
except PackageNotFoundError:
    __version__ = "0.0.0"
