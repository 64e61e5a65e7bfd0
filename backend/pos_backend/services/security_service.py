# Overview: Service-layer operations for security auditing.

"""
Security Event Logging with Tenant Context

WHY: Create an audit trail for integrity signals. A sale that references
another business's product is rejected and rolled back; the attempt itself
is kept here so it can be monitored after the fact.
"""

from flask import g, has_request_context, request

from ..extensions import db
from ..models import SecurityEvent
from ..time_utils import unix_now

CROSS_TENANT_SALE_DENIED = "CROSS_TENANT_SALE_DENIED"


def log_security_event(
    business_id: str | None,
    user_id: str | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail with tenant context.

    Commits on its own: callers invoke it after their own transaction has
    been rolled back, so the event survives the failed operation.
    """
    event = SecurityEvent(
        business_id=business_id,
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=unix_now(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def log_cross_tenant_attempt(reason: str, business_id: str | None = None, user_id: str | None = None) -> SecurityEvent:
    """
    Log a cross-tenant access attempt, enriched with request context when
    called while serving a request.
    """
    if user_id is None:
        user_id = getattr(g, "user_id", None) if has_request_context() else None

    in_request = has_request_context()
    return log_security_event(
        business_id=business_id,
        user_id=user_id,
        event_type=CROSS_TENANT_SALE_DENIED,
        success=False,
        resource=request.path if in_request else None,
        action=request.method if in_request else None,
        reason=reason,
        ip_address=request.remote_addr if in_request else None,
        user_agent=request.headers.get("User-Agent") if in_request else None,
    )
