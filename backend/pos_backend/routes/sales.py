# Overview: Flask API routes for sales; parses input and returns JSON responses.

"""Sales API routes"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import DEFAULT_HTTP_STATUS, SALE_HTTP_STATUS
from ..models.sales import cents_to_amount
from ..services import sales_service
from ..services.sale_validation import parse_sale_payload
from ..services.sales_service import SaleError


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _error(message: str, status: int):
    return jsonify({"error": True, "message": message}), status


@sales_bp.post("/")
@require_auth
def create_sale_route():
    """
    Record a completed sale.

    Body: {"branch_id", "payment_method", "items": [{"product_id", "quantity"}]}
    All authenticated users can create sales; business and cashier come
    from the authenticated identity, never from the body.
    """
    try:
        data = request.get_json(silent=True)
        sale_request = parse_sale_payload(data)

        result = sales_service.create_sale(
            business_id=g.business_id,
            cashier_id=g.user_id,
            branch_id=sale_request.branch_id,
            payment_method=sale_request.payment_method,
            items=list(sale_request.items),
        )

        return jsonify({
            "success": True,
            "sale_id": result.sale_id,
            "total_amount": cents_to_amount(result.total_amount_cents),
            "total_amount_cents": result.total_amount_cents,
        }), 201

    except SaleError as e:
        return _error(e.message, SALE_HTTP_STATUS[e.kind])
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return _error("Internal server error", 500)


@sales_bp.get("/stats")
@require_auth
def sales_stats_route():
    """
    Dashboard figures for the caller's business, optionally one branch.

    Query: branch_id (optional)
    """
    branch_id = request.args.get("branch_id") or None
    try:
        revenue_cents = sales_service.total_revenue(g.business_id, branch_id)
        recent = sales_service.recent_sales(g.business_id, branch_id, limit=5)

        return jsonify({
            "total_sales_today": sales_service.count_sales_today(g.business_id, branch_id),
            "total_revenue": cents_to_amount(revenue_cents),
            "total_revenue_cents": revenue_cents,
            "low_stock_count": sales_service.count_low_stock_products(g.business_id, branch_id),
            "recent_transactions": [
                {
                    "sale_id": sale.id,
                    "amount": cents_to_amount(sale.total_amount_cents),
                    "branch_id": sale.branch_id,
                    "cashier_id": sale.cashier_id,
                    "created_at": sale.created_at,
                }
                for sale in recent
            ],
        }), 200
    except Exception:
        current_app.logger.exception("Failed to load sales stats")
        return _error("Internal server error", 500)


@sales_bp.get("/<sale_id>")
@require_auth
def get_sale_route(sale_id: str):
    """Get sale with items."""
    try:
        sale = sales_service.get_sale(g.business_id, sale_id)
        return jsonify({"sale": sale.to_dict(include_items=True)}), 200
    except SaleError as e:
        return _error(e.message, DEFAULT_HTTP_STATUS[e.kind])
    except Exception:
        current_app.logger.exception("Failed to load sale")
        return _error("Internal server error", 500)
