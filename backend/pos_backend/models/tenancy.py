from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from ..time_utils import unix_now


class Business(db.Model):
    """
    Multi-tenant root: every tenant is a Business.

    MULTI-TENANT: Branches, products, sales and notifications all carry
    business_id. No sale may touch a product of another business.

    Business management (registration, owners, settings) lives outside this
    service; only the columns the sale engine needs are mapped here.
    """
    __tablename__ = "businesses"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    currency = db.Column(db.String(8), nullable=False, default="NGN")

    created_at = db.Column(db.Integer, nullable=False, default=unix_now)
    updated_at = db.Column(db.Integer, nullable=False, default=unix_now, onupdate=unix_now)

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "currency": self.currency,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class Branch(db.Model):
    """Branch (store location) within a business."""
    __tablename__ = "branches"
    __table_args__ = (
        db.Index("ix_branches_business_id", "business_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    business_id = db.Column(db.String(36), db.ForeignKey("businesses.id"), nullable=False)
    branch_name = db.Column(db.String(255), nullable=False)
    branch_address = db.Column(db.String(255), nullable=True)
    is_main_branch = db.Column(db.Boolean, nullable=False, default=False)

    # Soft delete: explicit, filtered explicitly by every query that cares
    deleted_at = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.Integer, nullable=False, default=unix_now)
    updated_at = db.Column(db.Integer, nullable=False, default=unix_now, onupdate=unix_now)

    business = db.relationship("Business", backref=db.backref("branches", lazy=True))

    def __repr__(self) -> str:
        return f"<Branch id={self.id} business_id={self.business_id} name={self.branch_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "branch_name": self.branch_name,
            "branch_address": self.branch_address,
            "is_main_branch": self.is_main_branch,
            "created_at": self.created_at,
        }
