# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, g, jsonify, request


def require_auth(f):
    """
    Require an authenticated identity and establish tenant context.

    Token verification happens in the gateway in front of this service; it
    forwards the verified identity in headers (names configurable via
    AUTH_BUSINESS_HEADER, AUTH_USER_HEADER, AUTH_ROLE_HEADER).

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.business_id: The tenant (business) the caller acts for - REQUIRED
    - g.user_id: Staff member or owner making the request - REQUIRED
    - g.role: The caller's role, if forwarded

    Returns 401 when the business or user identity is missing.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        config = current_app.config
        business_id = (request.headers.get(config["AUTH_BUSINESS_HEADER"]) or "").strip()
        user_id = (request.headers.get(config["AUTH_USER_HEADER"]) or "").strip()
        role = (request.headers.get(config["AUTH_ROLE_HEADER"]) or "").strip() or None

        if not business_id:
            return jsonify({"error": True, "message": "unauthorized: business ID not found"}), 401
        if not user_id:
            return jsonify({"error": True, "message": "unauthorized: user ID not found"}), 401

        g.business_id = business_id
        g.user_id = user_id
        g.role = role

        return f(*args, **kwargs)

    return decorated_function
