"""Rolling per-symbol liquidation statistics and the decorator.

The store keeps, per symbol, the running count and volume of confirmed
liquidations, the largest quantity seen and a bounded window of recent
quantities. ``decorate`` annotates an event from the state *before* the
event is included and then folds the event in, atomically.

Durable format (UTF-8 JSON, integers only so the round-trip is exact):

    {"version": 1, "symbols": {"XBTUSD": {"count": 3, ...}}}
"""

# pylint: disable=missing-function-docstring
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from liquidation_notifier.core.domain.errors import StatisticsStoreError
from liquidation_notifier.core.domain.types import AnnotatedLiquidation, LiquidationEvent

LOGGER = logging.getLogger(__name__)

DEFAULT_RECENT_WINDOW: int = 50


class SymbolStats(BaseModel):
    """Aggregate state for a single symbol."""

    count: int = Field(default=0, ge=0)
    total_quantity: int = Field(default=0, ge=0)
    max_quantity: int = Field(default=0, ge=0)
    # Oldest first, newest last.
    recent_quantities: tuple[int, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    def annotate(self, event: LiquidationEvent) -> AnnotatedLiquidation:
        larger = sum(1 for q in self.recent_quantities if q > event.quantity)
        return AnnotatedLiquidation(
            event=event,
            sequence=self.count + 1,
            cumulative_quantity=self.total_quantity + event.quantity,
            recent_rank=larger + 1,
            recent_count=len(self.recent_quantities) + 1,
            is_record=self.count > 0 and event.quantity > self.max_quantity,
        )

    def fold(self, event: LiquidationEvent, recent_window: int) -> SymbolStats:
        recent = (*self.recent_quantities, event.quantity)[-recent_window:]
        return SymbolStats(
            count=self.count + 1,
            total_quantity=self.total_quantity + event.quantity,
            max_quantity=max(self.max_quantity, event.quantity),
            recent_quantities=recent,
        )


class StoreSnapshot(BaseModel):
    version: Literal[1] = 1
    symbols: dict[str, SymbolStats] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class StatisticsStore:
    """Symbol -> SymbolStats, loaded at startup and flushed after each update.

    Symbols are created on first reference and never removed. A store without
    a path is purely in-memory and ``flush`` is a no-op.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        recent_window: int = DEFAULT_RECENT_WINDOW,
        symbols: dict[str, SymbolStats] | None = None,
    ) -> None:
        if recent_window < 1:
            raise ValueError("recent_window must be >= 1")
        self._path = Path(path) if path is not None else None
        self._recent_window = recent_window
        self._symbols: dict[str, SymbolStats] = dict(symbols) if symbols else {}
        self._lock = threading.Lock()

    # ---- Construction ----
    @classmethod
    def in_memory(cls, *, recent_window: int = DEFAULT_RECENT_WINDOW) -> StatisticsStore:
        return cls(None, recent_window=recent_window)

    @classmethod
    def load(cls, path: str | Path, *, recent_window: int = DEFAULT_RECENT_WINDOW) -> StatisticsStore:
        """Load the store from ``path``; a missing file yields an empty store."""
        path = Path(path)
        if not path.exists():
            LOGGER.info("No statistics state found, starting empty", extra={"path": str(path)})
            return cls(path, recent_window=recent_window)

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            snapshot = StoreSnapshot.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise StatisticsStoreError(f"failed to load state from {path}: {exc}") from exc

        LOGGER.info(
            "Loaded statistics state",
            extra={"path": str(path), "symbols": len(snapshot.symbols)},
        )
        return cls(path, recent_window=recent_window, symbols=snapshot.symbols)

    # ---- Accessors ----
    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def recent_window(self) -> int:
        return self._recent_window

    def get(self, symbol: str) -> SymbolStats:
        return self._symbols.get(symbol, SymbolStats())

    def symbols(self) -> list[str]:
        return sorted(self._symbols)

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(symbols=dict(self._symbols))

    # ---- Mutation ----
    def record(self, event: LiquidationEvent) -> AnnotatedLiquidation:
        """Annotate ``event`` from the prior state, then fold it in."""
        with self._lock:
            prior = self._symbols.get(event.symbol, SymbolStats())
            annotated = prior.annotate(event)
            self._symbols[event.symbol] = prior.fold(event, self._recent_window)
        return annotated

    def flush(self) -> bool:
        """Write the store to disk. Returns False (and logs) on failure.

        The in-memory state stays authoritative if the write fails.
        """
        if self._path is None:
            return True

        payload = self.snapshot().model_dump_json(indent=2)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            LOGGER.warning(
                "Failed to save state",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return False
        return True


def decorate(event: LiquidationEvent, store: StatisticsStore) -> AnnotatedLiquidation:
    """Annotate a confirmed liquidation and advance the store.

    Deterministic given the store state and the event.
    """
    return store.record(event)
