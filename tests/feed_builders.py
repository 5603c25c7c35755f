"""Builders for liquidation feed messages used across the test suite."""

from __future__ import annotations

from typing import Any

SECOND_NS = 1_000_000_000


def liquidation_entry(
    order_id: str = "A",
    symbol: str = "XBTUSD",
    side: str = "Sell",
    price: float = 100.0,
    leaves_qty: int = 50,
) -> dict[str, Any]:
    return {
        "orderID": order_id,
        "symbol": symbol,
        "side": side,
        "price": price,
        "leavesQty": leaves_qty,
    }


def liquidation_message(action: str, *entries: dict[str, Any]) -> dict[str, Any]:
    return {"table": "liquidation", "action": action, "data": list(entries)}


def insert(**kwargs: Any) -> dict[str, Any]:
    return liquidation_message("insert", liquidation_entry(**kwargs))


def delete(order_id: str = "A", symbol: str = "XBTUSD") -> dict[str, Any]:
    return liquidation_message("delete", {"orderID": order_id, "symbol": symbol})


def update(order_id: str = "A", **fields: Any) -> dict[str, Any]:
    return liquidation_message("update", {"orderID": order_id, **fields})
