# Overview: Pytest coverage for the sales and notification HTTP endpoints.

import pytest

from conftest import auth_headers, make_product
from pos_backend.models import Notification, Product, Sale
from pos_backend.services import sales_service


def _get(db_session, model, ident):
    # Requests may run in their own session; drop anything cached in ours
    db_session.expire_all()
    return db_session.get(model, ident)


def _sale_body(items, branch_id="branch-1", payment_method="cash"):
    return {"branch_id": branch_id, "payment_method": payment_method, "items": items}


class TestCreateSaleRoute:

    def test_create_sale_success(self, client, db_session, business_a, product_p):
        response = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product_p.id, "quantity": 3}]),
            headers=auth_headers(business_a.id),
        )

        assert response.status_code == 201
        data = response.get_json()
        assert data["success"] is True
        assert data["total_amount"] == 30.0
        assert data["total_amount_cents"] == 3000
        assert _get(db_session, Sale, data["sale_id"]).cashier_id == "cashier-1"
        assert _get(db_session, Product, product_p.id).quantity_in_stock == 2

    def test_client_price_is_ignored(self, client, db_session, business_a, product_p):
        response = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product_p.id, "quantity": 1, "unit_price": 1}]),
            headers=auth_headers(business_a.id),
        )
        assert response.get_json()["total_amount_cents"] == 1000

    def test_business_comes_from_identity_not_body(self, client, db_session, business_a, business_b, product_q):
        body = _sale_body([{"product_id": product_q.id, "quantity": 1}])
        body["business_id"] = business_b.id

        response = client.post("/api/sales/", json=body, headers=auth_headers(business_a.id))

        assert response.status_code == 400
        assert response.get_json()["message"] == "product does not belong to business"

    def test_requires_identity(self, client, db_session, product_p):
        response = client.post("/api/sales/", json=_sale_body([{"product_id": product_p.id, "quantity": 1}]))

        assert response.status_code == 401
        assert response.get_json()["error"] is True

    def test_requires_user_identity(self, client, db_session, business_a, product_p):
        response = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product_p.id, "quantity": 1}]),
            headers={"X-Business-ID": business_a.id},
        )
        assert response.status_code == 401
        assert response.get_json()["message"] == "unauthorized: user ID not found"

    @pytest.mark.parametrize("body", [
        {},
        {"branch_id": "b", "payment_method": "cash", "items": []},
        {"branch_id": "", "payment_method": "cash", "items": [{"product_id": "p", "quantity": 1}]},
        {"branch_id": "b", "payment_method": "cash", "items": [{"product_id": "p", "quantity": 0}]},
    ])
    def test_invalid_input_is_400(self, client, db_session, business_a, body):
        response = client.post("/api/sales/", json=body, headers=auth_headers(business_a.id))

        assert response.status_code == 400
        assert response.get_json()["error"] is True
        assert db_session.query(Sale).count() == 0

    def test_non_json_body_is_400(self, client, db_session, business_a):
        response = client.post(
            "/api/sales/",
            data="not json",
            content_type="text/plain",
            headers=auth_headers(business_a.id),
        )
        assert response.status_code == 400
        assert response.get_json()["message"] == "invalid input"

    def test_insufficient_stock_is_400(self, client, db_session, business_a, product_p):
        response = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product_p.id, "quantity": 6}]),
            headers=auth_headers(business_a.id),
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == f"insufficient stock for product {product_p.id}"
        assert _get(db_session, Product, product_p.id).quantity_in_stock == 5

    def test_missing_product_is_500(self, client, db_session, business_a):
        response = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": "no-such-product", "quantity": 1}]),
            headers=auth_headers(business_a.id),
        )

        assert response.status_code == 500
        assert response.get_json() == {"error": True, "message": "product not found"}


class TestReadRoutes:

    def test_get_sale_with_items(self, client, db_session, business_a, product_p, product_r):
        created = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product_p.id, "quantity": 1}, {"product_id": product_r.id, "quantity": 2}]),
            headers=auth_headers(business_a.id),
        ).get_json()

        response = client.get(f"/api/sales/{created['sale_id']}", headers=auth_headers(business_a.id))

        assert response.status_code == 200
        sale = response.get_json()["sale"]
        assert sale["total_amount_cents"] == 1500
        assert [i["product_id"] for i in sale["items"]] == [product_p.id, product_r.id]
        assert sale["items"][1]["subtotal"] == 5.0

    def test_get_sale_of_other_business_is_404(self, client, db_session, business_a, business_b, product_p):
        created = client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product_p.id, "quantity": 1}]),
            headers=auth_headers(business_a.id),
        ).get_json()

        response = client.get(f"/api/sales/{created['sale_id']}", headers=auth_headers(business_b.id))
        assert response.status_code == 404

    def test_get_sale_unexpected_error_is_json_500(self, client, db_session, business_a, monkeypatch):
        def broken(business_id, sale_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(sales_service, "get_sale", broken)

        response = client.get("/api/sales/some-sale", headers=auth_headers(business_a.id))

        assert response.status_code == 500
        assert response.get_json() == {"error": True, "message": "Internal server error"}

    def test_stats(self, client, db_session, business_a, product_p):
        for _ in range(2):
            client.post(
                "/api/sales/",
                json=_sale_body([{"product_id": product_p.id, "quantity": 2}]),
                headers=auth_headers(business_a.id),
            )

        response = client.get("/api/sales/stats", headers=auth_headers(business_a.id))

        assert response.status_code == 200
        data = response.get_json()
        assert data["total_sales_today"] == 2
        assert data["total_revenue"] == 40.0
        assert data["total_revenue_cents"] == 4000
        assert data["low_stock_count"] == 0
        assert len(data["recent_transactions"]) == 2

    def test_health(self, client, db_session):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_unknown_route_returns_json_error(self, client, db_session):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.get_json()["error"] is True


class TestNotificationRoutes:

    def _low_stock_sale(self, client, business, branch, db_session):
        product = make_product(db_session, branch, "Insulin Pen", 800, 3, threshold=1)
        client.post(
            "/api/sales/",
            json=_sale_body([{"product_id": product.id, "quantity": 2}]),
            headers=auth_headers(business.id),
        )
        return product

    def test_list_and_mark_read(self, client, db_session, business_a, branch_a):
        product = self._low_stock_sale(client, business_a, branch_a, db_session)

        response = client.get("/api/notifications/?unread_only=true", headers=auth_headers(business_a.id))
        notifications = response.get_json()["notifications"]
        assert len(notifications) == 1
        assert notifications[0]["product_id"] == product.id

        read = client.post(
            f"/api/notifications/{notifications[0]['id']}/read",
            headers=auth_headers(business_a.id),
        )
        assert read.status_code == 200
        assert read.get_json()["notification"]["is_read"] is True

        response = client.get("/api/notifications/?unread_only=true", headers=auth_headers(business_a.id))
        assert response.get_json()["notifications"] == []

    def test_notifications_are_tenant_scoped(self, client, db_session, business_a, business_b, branch_a):
        self._low_stock_sale(client, business_a, branch_a, db_session)
        notification = db_session.query(Notification).one()

        listed = client.get("/api/notifications/", headers=auth_headers(business_b.id))
        assert listed.get_json()["notifications"] == []

        response = client.post(
            f"/api/notifications/{notification.id}/read",
            headers=auth_headers(business_b.id),
        )
        assert response.status_code == 404
        assert _get(db_session, Notification, notification.id).is_read is False

    def test_bad_paging_is_400(self, client, db_session, business_a):
        response = client.get("/api/notifications/?limit=abc", headers=auth_headers(business_a.id))
        assert response.status_code == 400

        response = client.get("/api/notifications/?limit=0", headers=auth_headers(business_a.id))
        assert response.status_code == 400
