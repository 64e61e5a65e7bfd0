from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from ..time_utils import unix_now

SALE_STATUS_COMPLETED = "completed"


def cents_to_amount(cents: int | None) -> float:
    """Decimal currency amount for API responses (storage stays in cents)."""
    return round((cents or 0) / 100, 2)


class Sale(db.Model):
    """
    One completed point-of-sale transaction.

    WHY: A sale is written exactly once, inside the transaction that deducts
    stock for its items. There is no update path; total_amount_cents is
    derived from the items' subtotals and never supplied by a client.
    """
    __tablename__ = "sales"
    __table_args__ = (
        # Dashboard queries: business/branch scoped, newest first
        db.Index("ix_sales_business_created", "business_id", "created_at"),
        db.Index("ix_sales_business_branch_created", "business_id", "branch_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    business_id = db.Column(db.String(36), db.ForeignKey("businesses.id"), nullable=False)
    branch_id = db.Column(db.String(36), nullable=False)

    # Staff member or business owner who rang up the sale
    cashier_id = db.Column(db.String(36), nullable=False, index=True)

    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(64), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=SALE_STATUS_COMPLETED)

    created_at = db.Column(db.Integer, nullable=False, default=unix_now)

    items = db.relationship(
        "SaleItem",
        backref="sale",
        lazy=True,
        order_by="SaleItem.position",
    )

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "business_id": self.business_id,
            "branch_id": self.branch_id,
            "cashier_id": self.cashier_id,
            "total_amount": cents_to_amount(self.total_amount_cents),
            "total_amount_cents": self.total_amount_cents,
            "payment_method": self.payment_method,
            "status": self.status,
            "created_at": self.created_at,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class SaleItem(db.Model):
    """Line on a sale; unit price is a snapshot of the product price at sale time."""
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    sale_id = db.Column(db.String(36), db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False, index=True)

    # Request order of the line within its sale
    position = db.Column(db.Integer, nullable=False, default=0)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    subtotal_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.Integer, nullable=False, default=unix_now)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": cents_to_amount(self.unit_price_cents),
            "unit_price_cents": self.unit_price_cents,
            "subtotal": cents_to_amount(self.subtotal_cents),
            "subtotal_cents": self.subtotal_cents,
            "created_at": self.created_at,
        }
