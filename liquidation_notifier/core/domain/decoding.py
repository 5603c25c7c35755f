"""Strict decoding of feed messages into tagged results.

Decoding never raises on bad input. Each message is classified as an API
error, an ignorable message, a malformed liquidation message, or a
liquidation table message whose entries are individually validated. Callers
decide which outcomes are fatal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from pydantic import BaseModel, ValidationError

from liquidation_notifier.core.domain.drop_reasons import DropReason
from liquidation_notifier.core.domain.types import (
    FEED_ACTIONS,
    LIQUIDATION_TABLE,
    FeedEntry,
    OrderRef,
)


class MessageKind(str, Enum):
    ERROR = "error"
    IGNORED = "ignored"
    MALFORMED = "malformed"
    TABLE = "table"


@dataclass(frozen=True, slots=True)
class EntryOk:
    index: int
    value: Any


@dataclass(frozen=True, slots=True)
class EntryMalformed:
    index: int
    reason: str
    raw: Any


EntryResult = Union[EntryOk, EntryMalformed]


@dataclass(frozen=True, slots=True)
class DecodedMessage:
    kind: MessageKind

    table: str | None = None
    action: str | None = None
    entries: tuple[EntryResult, ...] = field(default_factory=tuple)

    # Populated for ERROR / IGNORED / MALFORMED.
    detail: str | None = None
    drop_reason: DropReason | None = None


def _summarize_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<entry>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def _decode_entry(index: int, raw: Any, model: type[BaseModel]) -> EntryResult:
    if not isinstance(raw, Mapping):
        return EntryMalformed(index=index, reason="entry is not an object", raw=raw)
    try:
        parsed = model.model_validate(dict(raw))
    except ValidationError as exc:
        return EntryMalformed(index=index, reason=_summarize_validation_error(exc), raw=raw)
    return EntryOk(index=index, value=parsed)


def decode_insert_entry(index: int, raw: Any) -> EntryResult:
    """Decode an ``insert`` entry into an ``EntryOk`` holding a LiquidationEvent."""
    result = _decode_entry(index, raw, FeedEntry)
    if isinstance(result, EntryOk):
        return EntryOk(index=index, value=result.value.to_event())
    return result


def decode_delete_entry(index: int, raw: Any) -> EntryResult:
    """Decode a ``delete`` entry into an ``EntryOk`` holding an OrderRef."""
    return _decode_entry(index, raw, OrderRef)


def decode_message(raw: Any) -> DecodedMessage:
    """Classify and validate one parsed feed frame."""
    if not isinstance(raw, Mapping):
        return DecodedMessage(
            kind=MessageKind.IGNORED,
            detail=f"top-level value is {type(raw).__name__}, not an object",
            drop_reason=DropReason.UNKNOWN_SHAPE,
        )

    if "error" in raw:
        return DecodedMessage(kind=MessageKind.ERROR, detail=str(raw["error"]))

    table = raw.get("table")
    if table is None:
        # Subscription acks, welcome banners, etc.
        return DecodedMessage(
            kind=MessageKind.IGNORED,
            detail="no table",
            drop_reason=DropReason.UNKNOWN_SHAPE,
        )

    if table != LIQUIDATION_TABLE:
        return DecodedMessage(
            kind=MessageKind.IGNORED,
            table=str(table),
            detail=f"table {table!r} is not subscribed",
            drop_reason=DropReason.FOREIGN_TABLE,
        )

    action = raw.get("action")
    if not isinstance(action, str) or action not in FEED_ACTIONS:
        return DecodedMessage(
            kind=MessageKind.MALFORMED,
            table=table,
            detail=f"unknown action {action!r}",
            drop_reason=DropReason.MALFORMED_MESSAGE,
        )

    data = raw.get("data")
    if not isinstance(data, list):
        return DecodedMessage(
            kind=MessageKind.MALFORMED,
            table=table,
            action=action,
            detail=f"data is {type(data).__name__}, not a list",
            drop_reason=DropReason.MALFORMED_MESSAGE,
        )

    # partial/update payloads are never acted upon, so they are not validated.
    if action == "insert":
        entries = tuple(decode_insert_entry(i, item) for i, item in enumerate(data))
    elif action == "delete":
        entries = tuple(decode_delete_entry(i, item) for i, item in enumerate(data))
    else:
        entries = ()

    return DecodedMessage(kind=MessageKind.TABLE, table=table, action=action, entries=entries)


__all__ = [
    "DecodedMessage",
    "EntryMalformed",
    "EntryOk",
    "EntryResult",
    "MessageKind",
    "decode_delete_entry",
    "decode_insert_entry",
    "decode_message",
]
