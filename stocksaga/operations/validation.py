"""
Request validation shared by the saga operations

Everything here runs before any store call.
"""

from collections.abc import Iterable
from typing import Any

from stocksaga.core.exceptions import EmptyOrderError, ValidationError
from stocksaga.types import OrderLine, SagaRequest


def validate_item_id(item_id: Any) -> str:
    if not isinstance(item_id, str) or not item_id.strip():
        msg = f"Item id must be a non-empty string, got {item_id!r}"
        raise ValidationError(msg, field="itemId")
    return item_id


def validate_quantity(quantity: Any) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        msg = f"Quantity must be a positive integer, got {quantity!r}"
        raise ValidationError(msg, field="quantity")
    return quantity


def validate_lines(lines: Iterable[OrderLine]) -> tuple[OrderLine, ...]:
    lines = tuple(lines)
    if not lines:
        raise EmptyOrderError()
    for line in lines:
        if not isinstance(line, OrderLine):
            msg = f"Expected OrderLine, got {type(line).__name__}"
            raise ValidationError(msg, field="lines")
        validate_item_id(line.item_id)
        validate_quantity(line.quantity)
    return lines


def parse_request(payload: Any) -> SagaRequest:
    """
    Build a validated SagaRequest from a caller payload.

    Expects ``{"lines": [{"itemId": str, "quantity": int}, ...]}``.
    """
    if not isinstance(payload, dict):
        msg = "Request body must be an object"
        raise ValidationError(msg)

    raw_lines = payload.get("lines")
    if raw_lines is None:
        raise EmptyOrderError()
    if not isinstance(raw_lines, list):
        msg = "'lines' must be a list"
        raise ValidationError(msg, field="lines")

    lines = []
    for raw in raw_lines:
        if not isinstance(raw, dict):
            msg = f"Each line must be an object, got {raw!r}"
            raise ValidationError(msg, field="lines")
        lines.append(OrderLine.from_dict(raw))

    return SagaRequest(lines=validate_lines(lines))


def merge_lines(lines: Iterable[OrderLine]) -> tuple[OrderLine, ...]:
    """
    Merge lines naming the same item, summing quantities.

    The merged lines keep the position of each item's first occurrence.
    """
    totals: dict[str, int] = {}
    for line in lines:
        totals[line.item_id] = totals.get(line.item_id, 0) + line.quantity
    return tuple(OrderLine(item_id, quantity) for item_id, quantity in totals.items())
