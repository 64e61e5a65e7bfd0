# Overview: Structural validation of incoming sale requests; no database access.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..errors import ErrorKind, SaleError


@dataclass(frozen=True)
class SaleItemRequest:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class SaleRequest:
    """A structurally valid sale request, items in request order."""
    branch_id: str
    payment_method: str
    items: tuple[SaleItemRequest, ...]

    @property
    def product_ids(self) -> list[str]:
        """Distinct product ids in sorted order (the lock acquisition order)."""
        return sorted({item.product_id for item in self.items})


def _invalid(message: str, **details) -> SaleError:
    return SaleError(message, kind=ErrorKind.INVALID_INPUT, details=details)


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_quantity(value: Any, index: int) -> int:
    # bool is an int subclass; floats and numeric strings are not quantities
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid("quantity must be an integer", item_index=index)
    if value <= 0:
        raise _invalid("quantity must be greater than 0", item_index=index)
    return value


def validate_sale_request(branch_id: Any, payment_method: Any, items: Any) -> SaleRequest:
    """
    Validate a sale request before any transaction is opened.

    Rejects with INVALID_INPUT when branch or payment method is empty, the
    item list is empty, an item has no product id, or a quantity is not a
    positive integer. Pure: the same input always gives the same outcome.
    """
    branch = _clean_str(branch_id)
    method = _clean_str(payment_method)

    if not branch or not method or not items:
        raise _invalid("invalid input")

    if not isinstance(items, (list, tuple)):
        raise _invalid("items must be a list")

    cleaned: list[SaleItemRequest] = []
    for index, item in enumerate(items):
        if isinstance(item, SaleItemRequest):
            product_id, quantity = item.product_id, item.quantity
        elif isinstance(item, dict):
            product_id, quantity = item.get("product_id"), item.get("quantity")
        else:
            raise _invalid("each item must be an object", item_index=index)

        product_id = _clean_str(product_id)
        if not product_id:
            raise _invalid("product_id required", item_index=index)

        cleaned.append(SaleItemRequest(product_id=product_id, quantity=_coerce_quantity(quantity, index)))

    return SaleRequest(branch_id=branch, payment_method=method, items=tuple(cleaned))


def parse_sale_payload(payload: Any) -> SaleRequest:
    """Validate a decoded JSON body of the create-sale endpoint."""
    if not isinstance(payload, dict):
        raise _invalid("invalid input")

    return validate_sale_request(
        payload.get("branch_id"),
        payload.get("payment_method"),
        payload.get("items"),
    )
