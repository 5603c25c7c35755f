"""Core liquidation data models.

This module defines the canonical Pydantic models for liquidation-feed
entries and the immutable records that flow through the reconciler. The wire
models mirror the JSON Schemas under ``core/schemas`` and are the single
source of truth for what a well-formed feed entry looks like.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Side = Literal["Buy", "Sell"]
FeedAction = Literal["partial", "insert", "update", "delete"]

LIQUIDATION_TABLE: str = "liquidation"
FEED_ACTIONS: frozenset[str] = frozenset({"partial", "insert", "update", "delete"})


# ---------------------------------------------------------------------------
# Wire models (one element of a message's "data" array)
# ---------------------------------------------------------------------------


class OrderRef(BaseModel):
    """Minimal entry shape: only the order identifier is required.

    Used for ``delete`` entries, which the feed may trim down to key columns.
    """

    order_id: str = Field(..., alias="orderID", min_length=1)

    model_config = ConfigDict(extra="ignore", strict=True, frozen=True)


class FeedEntry(BaseModel):
    """A full liquidation entry as sent with ``insert`` actions."""

    order_id: str = Field(..., alias="orderID", min_length=1)
    symbol: str = Field(..., min_length=1)
    side: Side
    price: float = Field(..., gt=0)
    leaves_qty: int = Field(..., alias="leavesQty", gt=0)

    # The feed may add columns over time; unknown keys are not a contract violation.
    model_config = ConfigDict(extra="ignore", strict=True, frozen=True)

    @field_validator("leaves_qty", mode="before")
    @classmethod
    def _integral_float_quantity(cls, value: Any) -> Any:
        # Integral floats such as 100.0 are integers, as in the JSON Schema.
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    def to_event(self) -> LiquidationEvent:
        return LiquidationEvent(
            symbol=self.symbol,
            side=self.side,
            price=self.price,
            quantity=self.leaves_qty,
            order_id=self.order_id,
        )


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------


class LiquidationEvent(BaseModel):
    """A raw liquidation, immutable once constructed."""

    symbol: str = Field(..., min_length=1)
    side: Side
    price: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0, description="Remaining (leaves) size at time of report.")
    order_id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def notional(self) -> float:
        return self.price * self.quantity

    @property
    def liquidated_position(self) -> str:
        """Direction of the position that was force-closed.

        A liquidation engine sells to close a long and buys to close a short.
        """
        return "long" if self.side == "Sell" else "short"


@dataclass(frozen=True, slots=True)
class AnnotatedLiquidation:
    """A confirmed liquidation enriched with per-symbol statistics.

    All statistics are computed from the store state prior to folding in
    ``event`` and then describe the symbol including ``event``:

    - sequence: 1-based count of confirmed liquidations for the symbol
    - cumulative_quantity: total confirmed quantity for the symbol
    - recent_rank: 1-based rank of the quantity among the recent window
      (1 = largest, ties share the better rank)
    - recent_count: number of quantities the rank was computed over
    - is_record: quantity strictly exceeds every earlier quantity for the symbol
    """

    event: LiquidationEvent

    sequence: int
    cumulative_quantity: int

    recent_rank: int
    recent_count: int

    is_record: bool

    @property
    def symbol(self) -> str:
        return self.event.symbol

    @property
    def notional(self) -> float:
        return self.event.notional
