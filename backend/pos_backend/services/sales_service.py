"""
Sales Service - atomic sale recording against shared inventory

WHY: A sale deducts stock from products that other registers may be selling
at the same moment. Each sale runs as one unit of work: the sale row, its
items and every stock deduction commit together or not at all, and stock is
only read and written while the product row is locked.

LOCK ORDER: distinct product ids are locked in sorted order before any line
is processed. Two sales touching the same products therefore always queue in
the same order and cannot deadlock each other. Lines are still processed in
request order, so a product listed twice accumulates against one locked row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ErrorKind, SaleError
from ..extensions import db
from ..identifiers import new_id
from ..models import Product, Sale, SaleItem
from ..models.sales import SALE_STATUS_COMPLETED
from ..time_utils import unix_now, start_of_utc_day
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry
from .notification_service import create_low_stock_notification
from .sale_validation import SaleRequest, validate_sale_request
from .security_service import log_cross_tenant_attempt

__all__ = [
    "SaleError",
    "SaleResult",
    "aggregate_total",
    "create_sale",
    "get_sale",
    "count_sales_today",
    "total_revenue",
    "recent_sales",
    "count_low_stock_products",
]


@dataclass(frozen=True)
class SaleResult:
    sale_id: str
    total_amount_cents: int


def aggregate_total(subtotals: Iterable[int]) -> int:
    """Sale total in cents: the sum of line subtotals computed under lock."""
    return sum(subtotals)


def _lock_products(product_ids: list[str]) -> dict[str, Product]:
    """
    Acquire exclusive row locks on products, one at a time in the given
    (sorted) order. Missing and soft-deleted products are simply absent from
    the result; the caller decides how to fail.
    """
    locked: dict[str, Product] = {}
    for product_id in product_ids:
        product = lock_for_update(
            Product.active().filter(Product.id == product_id)
        ).first()
        if product is not None:
            locked[product_id] = product
    return locked


def _record_sale_locked(business_id: str, cashier_id: str, request: SaleRequest) -> SaleResult:
    sale = Sale(
        id=new_id(),
        business_id=business_id,
        branch_id=request.branch_id,
        cashier_id=cashier_id,
        total_amount_cents=0,
        payment_method=request.payment_method,
        status=SALE_STATUS_COMPLETED,
        created_at=unix_now(),
    )
    db.session.add(sale)
    db.session.flush()

    locked = _lock_products(request.product_ids)

    subtotals: list[int] = []
    touched: dict[str, Product] = {}
    for position, item in enumerate(request.items):
        product = locked.get(item.product_id)
        if product is None:
            raise SaleError(
                "product not found",
                kind=ErrorKind.NOT_FOUND,
                details={"product_id": item.product_id},
            )

        if product.business_id != business_id:
            raise SaleError(
                "product does not belong to business",
                kind=ErrorKind.FORBIDDEN,
                details={"product_id": product.id},
            )

        if item.quantity <= 0:
            raise SaleError("quantity must be greater than 0", kind=ErrorKind.INVALID_INPUT)

        if item.quantity > product.quantity_in_stock:
            raise SaleError(
                f"insufficient stock for product {product.id}",
                kind=ErrorKind.CONFLICT,
                details={
                    "product_id": product.id,
                    "requested_quantity": item.quantity,
                    "quantity_in_stock": product.quantity_in_stock,
                },
            )

        unit_price_cents = product.selling_price_cents
        subtotal_cents = unit_price_cents * item.quantity

        db.session.add(SaleItem(
            id=new_id(),
            sale_id=sale.id,
            product_id=product.id,
            position=position,
            quantity=item.quantity,
            unit_price_cents=unit_price_cents,
            subtotal_cents=subtotal_cents,
            created_at=unix_now(),
        ))

        new_stock = product.quantity_in_stock - item.quantity
        if new_stock < 0:
            raise SaleError("stock would become negative", kind=ErrorKind.CONFLICT,
                            details={"product_id": product.id})

        product.quantity_in_stock = new_stock
        subtotals.append(subtotal_cents)
        touched[product.id] = product

    sale.total_amount_cents = aggregate_total(subtotals)

    for product in touched.values():
        if product.is_low_stock:
            create_low_stock_notification(product)

    db.session.flush()
    return SaleResult(sale_id=sale.id, total_amount_cents=sale.total_amount_cents)


def create_sale(
    business_id: str,
    cashier_id: str,
    branch_id: str,
    payment_method: str,
    items,
) -> SaleResult:
    """
    Record a completed sale and deduct its stock as one atomic unit of work.

    items is an ordered list of {"product_id", "quantity"} dicts (or
    SaleItemRequest). Prices come from the locked product rows; clients never
    supply them.

    Raises SaleError tagged with an ErrorKind. On any failure nothing is
    persisted: no sale, no items, no stock change.
    """
    if not business_id or not cashier_id:
        raise SaleError("business_id and cashier_id required", kind=ErrorKind.INVALID_INPUT)

    request = validate_sale_request(branch_id, payment_method, items)
    config = current_app.config

    def _op():
        try:
            begin_write_transaction(config.get("SALE_LOCK_TIMEOUT_MS", 0))
            result = _record_sale_locked(business_id, cashier_id, request)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return result

    try:
        result = run_with_retry(
            _op,
            attempts=config.get("SALE_RETRY_ATTEMPTS", 3),
            backoff_base=config.get("SALE_RETRY_BACKOFF", 0.1),
        )
    except SaleError as e:
        if e.kind is ErrorKind.FORBIDDEN:
            current_app.logger.warning(
                "Cross-tenant sale rejected: business=%s cashier=%s product=%s",
                business_id, cashier_id, e.details.get("product_id"),
            )
            try:
                log_cross_tenant_attempt(
                    f"Sale by business {business_id} referenced product {e.details.get('product_id')}",
                    business_id=business_id,
                    user_id=cashier_id,
                )
            except SQLAlchemyError:
                # The rejection stands even when the audit row cannot be written
                db.session.rollback()
                current_app.logger.exception("Failed to record cross-tenant sale attempt")
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Sale transaction failed")
        raise SaleError("failed to create sale", kind=ErrorKind.INTERNAL) from e

    current_app.logger.info(
        "Sale %s recorded: business=%s branch=%s items=%s total_cents=%s",
        result.sale_id, business_id, request.branch_id, len(request.items), result.total_amount_cents,
    )
    return result


def get_sale(business_id: str, sale_id: str) -> Sale:
    """Fetch a sale with its items; sales of other businesses are not found."""
    sale = db.session.query(Sale).filter_by(id=sale_id, business_id=business_id).first()
    if not sale:
        raise SaleError("sale not found", kind=ErrorKind.NOT_FOUND)
    return sale


def _scoped_sales(business_id: str, branch_id: str | None):
    query = db.session.query(Sale).filter(Sale.business_id == business_id)
    if branch_id:
        query = query.filter(Sale.branch_id == branch_id)
    return query


def count_sales_today(business_id: str, branch_id: str | None = None, now: int | None = None) -> int:
    """Number of sales since the most recent UTC midnight."""
    return _scoped_sales(business_id, branch_id).filter(
        Sale.created_at >= start_of_utc_day(now)
    ).count()


def total_revenue(business_id: str, branch_id: str | None = None) -> int:
    """Revenue in cents across all sales; 0 when there are none."""
    query = db.session.query(func.coalesce(func.sum(Sale.total_amount_cents), 0)).filter(
        Sale.business_id == business_id
    )
    if branch_id:
        query = query.filter(Sale.branch_id == branch_id)
    return int(query.scalar() or 0)


def recent_sales(business_id: str, branch_id: str | None = None, limit: int = 5) -> list[Sale]:
    return (
        _scoped_sales(business_id, branch_id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )


def count_low_stock_products(business_id: str, branch_id: str | None = None) -> int:
    query = Product.active().filter(
        Product.business_id == business_id,
        Product.quantity_in_stock <= Product.low_stock_threshold,
    )
    if branch_id:
        query = query.filter(Product.branch_id == branch_id)
    return query.count()
