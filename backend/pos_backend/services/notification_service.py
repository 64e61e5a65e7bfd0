# Overview: Service-layer operations for notifications; low stock alerts and inbox reads.

from __future__ import annotations

from ..errors import ErrorKind, NotificationError
from ..extensions import db
from ..models import Notification, Product
from ..models.communications import NOTIFICATION_LOW_STOCK
from ..time_utils import unix_now

MAX_PAGE_SIZE = 100


def has_unread_low_stock_notification(business_id: str, product_id: str) -> bool:
    return db.session.query(Notification.id).filter_by(
        business_id=business_id,
        product_id=product_id,
        notification_type=NOTIFICATION_LOW_STOCK,
        is_read=False,
    ).first() is not None


def create_low_stock_notification(product: Product) -> Notification | None:
    """
    Raise a low stock alert for a product.

    Does not commit: the sale transaction that lowered the stock owns the
    unit of work. Returns None when an unread alert already exists.
    """
    if has_unread_low_stock_notification(product.business_id, product.id):
        return None

    notification = Notification(
        business_id=product.business_id,
        product_id=product.id,
        notification_type=NOTIFICATION_LOW_STOCK,
        message=f"{product.product_name} is running low, only {product.quantity_in_stock} items left.",
        is_read=False,
        created_at=unix_now(),
    )
    db.session.add(notification)
    return notification


def list_notifications(
    business_id: str,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> list[Notification]:
    if limit <= 0 or offset < 0:
        raise NotificationError("limit must be positive and offset non-negative")

    query = db.session.query(Notification).filter_by(business_id=business_id)
    if unread_only:
        query = query.filter_by(is_read=False)

    return (
        query.order_by(Notification.created_at.desc(), Notification.id)
        .limit(min(limit, MAX_PAGE_SIZE))
        .offset(offset)
        .all()
    )


def mark_notification_read(business_id: str, notification_id: str) -> Notification:
    notification = db.session.query(Notification).filter_by(
        id=notification_id,
        business_id=business_id,
    ).first()
    if not notification:
        raise NotificationError("notification not found", kind=ErrorKind.NOT_FOUND)

    notification.is_read = True
    db.session.commit()
    return notification
