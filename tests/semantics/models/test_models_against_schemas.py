"""Schema conformance tests for the feed wire models.

Each case is validated by both the JSON Schema under ``core/schemas`` and the
Pydantic decode path; the two must agree on acceptance.
"""

# pylint: disable=missing-function-docstring
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from feed_builders import liquidation_entry, liquidation_message
from jsonschema import Draft202012Validator
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from liquidation_notifier.core.domain.decoding import (
    EntryMalformed,
    EntryOk,
    MessageKind,
    decode_delete_entry,
    decode_insert_entry,
    decode_message,
)

SCHEMA_DIR = Path(__file__).resolve().parents[3] / "liquidation_notifier" / "core" / "schemas"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load_schema(name: str) -> dict[str, Any]:
    with (SCHEMA_DIR / name).open("r", encoding="utf-8") as f:
        return json.load(f)


def _registry() -> Registry:
    registry = Registry()
    for name in ("liquidation_entry.schema.json", "order_ref.schema.json", "feed_message.schema.json"):
        schema = load_schema(name)
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        registry = registry.with_resource(schema["$id"], resource)
    return registry


REGISTRY = _registry()


def schema_accepts(name: str, instance: Any) -> bool:
    validator = Draft202012Validator(load_schema(name), registry=REGISTRY)
    return validator.is_valid(instance)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

INSERT_ENTRY_CASES = [
    (liquidation_entry(), True),
    (liquidation_entry(side="Buy", price=9500, leaves_qty=1), True),
    ({**liquidation_entry(), "extra": "column"}, True),
    ({k: v for k, v in liquidation_entry().items() if k != "symbol"}, False),
    ({**liquidation_entry(), "side": "buy"}, False),
    ({**liquidation_entry(), "price": 0}, False),
    ({**liquidation_entry(), "price": "1.5"}, False),
    ({**liquidation_entry(), "leavesQty": -3}, False),
    ({**liquidation_entry(), "leavesQty": 100.0}, True),
    ({**liquidation_entry(), "leavesQty": 12.5}, False),
    ({**liquidation_entry(), "leavesQty": True}, False),
    ({**liquidation_entry(), "leavesQty": "3"}, False),
    ({**liquidation_entry(), "orderID": ""}, False),
    ({**liquidation_entry(), "orderID": None}, False),
]


@pytest.mark.parametrize("entry,valid", INSERT_ENTRY_CASES)
def test_insert_entry_agrees_with_schema(entry: dict[str, Any], valid: bool) -> None:
    assert schema_accepts("liquidation_entry.schema.json", entry) is valid

    result = decode_insert_entry(0, entry)
    assert isinstance(result, EntryOk if valid else EntryMalformed)


def test_insert_entry_maps_to_event() -> None:
    result = decode_insert_entry(3, liquidation_entry(order_id="x1", side="Buy", price=9500.5, leaves_qty=20))

    assert isinstance(result, EntryOk)
    assert result.index == 3
    event = result.value
    assert (event.order_id, event.symbol, event.side, event.price, event.quantity) == (
        "x1",
        "XBTUSD",
        "Buy",
        9500.5,
        20,
    )
    assert event.liquidated_position == "short"


@pytest.mark.parametrize(
    "entry,valid",
    [
        ({"orderID": "A"}, True),
        ({"orderID": "A", "symbol": "XBTUSD"}, True),
        ({"symbol": "XBTUSD"}, False),
        ({"orderID": 7}, False),
    ],
)
def test_delete_entry_agrees_with_schema(entry: dict[str, Any], valid: bool) -> None:
    assert schema_accepts("order_ref.schema.json", entry) is valid
    assert isinstance(decode_delete_entry(0, entry), EntryOk if valid else EntryMalformed)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

def test_well_formed_messages_match_schema() -> None:
    for message in (
        liquidation_message("insert", liquidation_entry()),
        liquidation_message("delete", {"orderID": "A"}),
        liquidation_message("update", {"orderID": "A", "price": 1.0}),
        liquidation_message("partial"),
    ):
        assert schema_accepts("feed_message.schema.json", message)
        decoded = decode_message(message)
        assert decoded.kind is MessageKind.TABLE
        assert all(isinstance(e, EntryOk) for e in decoded.entries)


@pytest.mark.parametrize(
    "message",
    [
        {"table": "liquidation", "action": "replace", "data": []},
        {"table": "liquidation", "action": "insert", "data": "A"},
        {"table": "liquidation", "action": "insert"},
    ],
)
def test_malformed_messages_rejected_by_both(message: dict[str, Any]) -> None:
    assert not schema_accepts("feed_message.schema.json", message)
    assert decode_message(message).kind is MessageKind.MALFORMED


def test_insert_message_with_bad_entry_fails_schema_but_decodes_partially() -> None:
    message = liquidation_message("insert", liquidation_entry(order_id="ok"), {"orderID": "bad"})

    assert not schema_accepts("feed_message.schema.json", message)

    decoded = decode_message(message)
    assert decoded.kind is MessageKind.TABLE
    assert isinstance(decoded.entries[0], EntryOk)
    assert isinstance(decoded.entries[1], EntryMalformed)
    assert decoded.entries[1].index == 1


def test_error_message_classification() -> None:
    decoded = decode_message({"status": 401, "error": "Not authorized"})

    assert decoded.kind is MessageKind.ERROR
    assert decoded.detail == "Not authorized"


def test_integral_float_quantity_decodes_as_int() -> None:
    result = decode_insert_entry(0, {**liquidation_entry(), "leavesQty": 100.0})

    assert isinstance(result, EntryOk)
    assert result.value.quantity == 100
    assert isinstance(result.value.quantity, int)
