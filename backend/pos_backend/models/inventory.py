from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from ..time_utils import unix_now


class Product(db.Model):
    """
    Product master data and its sellable stock.

    MULTI-TENANT: Products are scoped to a business (and shelved at a branch).

    STOCK: quantity_in_stock is the authoritative count of sellable units.
    During a sale it is only read and written while the row is locked
    (SELECT ... FOR UPDATE) by the sale transaction. The check constraint is
    the last line of defence: stock can never be committed below zero.

    SOFT DELETE: deleted_at is set instead of removing the row. Every query
    that must ignore deleted products filters on it explicitly
    (see Product.active()).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity_in_stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_business_branch", "business_id", "branch_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    business_id = db.Column(db.String(36), db.ForeignKey("businesses.id"), nullable=False, index=True)
    branch_id = db.Column(db.String(36), db.ForeignKey("branches.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    product_category = db.Column(db.String(120), nullable=True)
    barcode_value = db.Column(db.String(64), nullable=True, unique=True)

    # Authoritative storage in cents (clients never supply a sale price)
    selling_price_cents = db.Column(db.Integer, nullable=False)
    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)

    quantity_in_stock = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=0)

    deleted_at = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.Integer, nullable=False, default=unix_now)
    updated_at = db.Column(db.Integer, nullable=False, default=unix_now, onupdate=unix_now)

    business = db.relationship("Business", backref=db.backref("products", lazy=True))
    branch = db.relationship("Branch", backref=db.backref("products", lazy=True))

    @classmethod
    def active(cls):
        """Query over products that have not been soft-deleted."""
        return db.session.query(cls).filter(cls.deleted_at.is_(None))

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_in_stock <= self.low_stock_threshold

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.product_name!r} stock={self.quantity_in_stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "branch_id": self.branch_id,
            "product_name": self.product_name,
            "product_category": self.product_category,
            "barcode_value": self.barcode_value,
            "selling_price_cents": self.selling_price_cents,
            "cost_price_cents": self.cost_price_cents,
            "quantity_in_stock": self.quantity_in_stock,
            "low_stock_threshold": self.low_stock_threshold,
            "deleted_at": self.deleted_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
