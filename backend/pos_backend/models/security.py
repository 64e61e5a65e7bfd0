from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from ..time_utils import unix_now


class SecurityEvent(db.Model):
    """
    Security event audit log with tenant context.

    WHY: Cross-tenant attempts (e.g. selling another business's product) are
    integrity signals worth keeping after the failed transaction is gone.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_business_occurred", "business_id", "occurred_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    business_id = db.Column(db.String(36), nullable=True, index=True)
    user_id = db.Column(db.String(36), nullable=True, index=True)

    event_type = db.Column(db.String(64), nullable=False, index=True)  # CROSS_TENANT_SALE_DENIED, ...
    resource = db.Column(db.String(128), nullable=True)  # e.g., "/api/sales/"
    action = db.Column(db.String(64), nullable=True)     # e.g., "POST"

    success = db.Column(db.Boolean, nullable=False, default=False)
    reason = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    occurred_at = db.Column(db.Integer, nullable=False, default=unix_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "user_id": self.user_id,
            "event_type": self.event_type,
            "resource": self.resource,
            "action": self.action,
            "success": self.success,
            "reason": self.reason,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "occurred_at": self.occurred_at,
        }
