from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from ..time_utils import unix_now

NOTIFICATION_LOW_STOCK = "low_stock"


class Notification(db.Model):
    """
    Business-scoped notification (currently: low stock alerts).

    At most one unread low_stock notification exists per product; a new one
    is only raised once the previous alert has been read.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_business_read_created", "business_id", "is_read", "created_at"),
        db.Index("ix_notifications_product_type", "product_id", "notification_type"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    business_id = db.Column(db.String(36), db.ForeignKey("businesses.id"), nullable=False)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=True)

    notification_type = db.Column(db.String(32), nullable=False)
    message = db.Column(db.String(512), nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.Integer, nullable=False, default=unix_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "product_id": self.product_id,
            "notification_type": self.notification_type,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at,
        }
