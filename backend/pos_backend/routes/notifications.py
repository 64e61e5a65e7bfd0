# Overview: Flask API routes for notifications.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import DEFAULT_HTTP_STATUS
from ..services import notification_service
from ..services.notification_service import NotificationError


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("/")
@require_auth
def list_notifications_route():
    """
    List the business's notifications, newest first.

    Query: unread_only (true/false), limit (default 20), offset (default 0)
    """
    unread_only = request.args.get("unread_only", "false").lower() in ("1", "true", "yes")
    try:
        limit = int(request.args.get("limit", 20))
        offset = int(request.args.get("offset", 0))
    except ValueError:
        return jsonify({"error": True, "message": "limit and offset must be integers"}), 400

    try:
        notifications = notification_service.list_notifications(
            g.business_id,
            unread_only=unread_only,
            limit=limit,
            offset=offset,
        )
    except NotificationError as e:
        return jsonify({"error": True, "message": e.message}), DEFAULT_HTTP_STATUS[e.kind]

    return jsonify({"notifications": [n.to_dict() for n in notifications]}), 200


@notifications_bp.post("/<notification_id>/read")
@require_auth
def mark_notification_read_route(notification_id: str):
    try:
        notification = notification_service.mark_notification_read(g.business_id, notification_id)
        return jsonify({"notification": notification.to_dict()}), 200
    except NotificationError as e:
        return jsonify({"error": True, "message": e.message}), DEFAULT_HTTP_STATUS[e.kind]
    except Exception:
        current_app.logger.exception("Failed to mark notification read")
        return jsonify({"error": True, "message": "Internal server error"}), 500
