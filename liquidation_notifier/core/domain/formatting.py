"""Human-readable rendering of annotated liquidations."""

from __future__ import annotations

from liquidation_notifier.core.domain.types import AnnotatedLiquidation


def _fmt_price(value: float) -> str:
    # Drop trailing zeros but keep thousands separators: 9500.5 -> "9,500.5"
    text = f"{value:,.8f}".rstrip("0").rstrip(".")
    return text


def render_notification(annotated: AnnotatedLiquidation) -> str:
    """Render a single-line notification for a confirmed liquidation."""
    event = annotated.event

    parts = [
        f"Liquidated {event.liquidated_position} on {event.symbol}: "
        f"{event.side} {event.quantity:,} contracts at {_fmt_price(event.price)}",
        f"notional {_fmt_price(annotated.notional)}",
        f"#{annotated.sequence:,} for {event.symbol}, "
        f"{annotated.cumulative_quantity:,} contracts total",
        f"rank {annotated.recent_rank} of {annotated.recent_count} recent",
    ]
    if annotated.is_record:
        parts.append("new record")

    return " | ".join(parts)
