"""
Tests for admin login, password reset requests, dashboard and product creation.
"""

from datetime import timedelta

import pytest

from rest_api.models import AdminToken
from rest_api.models.base import utcnow
from rest_api.services.domain import AdminService, OrderService
from shared.security.tokens import hash_token
from shared.utils.exceptions import AuthError
from shared.utils.schemas import CreateOrderRequest
from tests.conftest import order_body


def place_order(db_session, product, payment_status="pending", total="15.00"):
    request = CreateOrderRequest.model_validate(
        order_body(
            product.establishment_id,
            [{"productId": product.id, "quantity": 1, "price": str(product.price)}],
            totalAmount=total,
        )
    )
    return OrderService(db_session).create_order(request.order, request.items, payment_status=payment_status)


class TestLogin:
    def test_success(self, client, seed_admin, db_session):
        response = client.post("/api/admin/login", json={"username": "admin", "password": "testpass123"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["admin"] == {"id": seed_admin.id, "username": "admin"}
        assert data["expiresAt"]
        # Only the digest is stored
        stored = db_session.query(AdminToken).one()
        assert stored.token_hash == hash_token(data["token"])
        assert stored.token_hash != data["token"]

    @pytest.mark.parametrize(
        "username, password",
        [("admin", "wrong"), ("nobody", "testpass123")],
    )
    def test_invalid_credentials(self, client, seed_admin, username, password):
        response = client.post("/api/admin/login", json={"username": username, "password": password})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_drops_expired_tokens(self, client, db_session, seed_admin):
        db_session.add_all([
            AdminToken(
                token_hash=hash_token("old"),
                admin_id=seed_admin.id,
                expires_at=utcnow() - timedelta(hours=1),
            ),
            AdminToken(
                token_hash=hash_token("current"),
                admin_id=seed_admin.id,
                expires_at=utcnow() + timedelta(hours=1),
            ),
        ])
        db_session.commit()

        response = client.post("/api/admin/login", json={"username": "admin", "password": "testpass123"})

        assert response.status_code == 200
        db_session.expire_all()
        hashes = {t.token_hash for t in db_session.query(AdminToken).all()}
        assert hashes == {hash_token("current"), hash_token(response.json()["token"])}

    def test_inactive_admin(self, client, db_session, seed_admin):
        seed_admin.is_active = False
        db_session.commit()
        response = client.post("/api/admin/login", json={"username": "admin", "password": "testpass123"})
        assert response.status_code == 401

    def test_missing_fields(self, client):
        response = client.post("/api/admin/login", json={"username": "admin"})
        assert response.status_code == 400


class TestTokens:
    def test_expired_token(self, db_session, seed_admin):
        db_session.add(
            AdminToken(
                token_hash=hash_token("stale"),
                admin_id=seed_admin.id,
                expires_at=utcnow() - timedelta(minutes=1),
            )
        )
        db_session.commit()

        with pytest.raises(AuthError):
            AdminService(db_session).resolve_token("stale")

    def test_protected_route_without_token(self, client, seed_establishments):
        market, _ = seed_establishments
        assert client.get(f"/api/establishments/{market.id}/stats").status_code == 401

    def test_protected_route_with_bad_token(self, client, seed_establishments):
        market, _ = seed_establishments
        response = client.get(
            f"/api/establishments/{market.id}/stats",
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


class TestForgotPassword:
    def test_known_email(self, client, seed_admin):
        response = client.post("/api/admin/forgot-password", json={"email": "ADMIN@test.com"})
        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_unknown_email(self, client, seed_admin):
        response = client.post("/api/admin/forgot-password", json={"email": "ghost@test.com"})
        assert response.status_code == 404

    def test_invalid_email(self, client):
        response = client.post("/api/admin/forgot-password", json={"email": "not-an-email"})
        assert response.status_code == 400


class TestDashboard:
    def test_stats(self, client, db_session, auth_headers, seed_products):
        apple, baguette = seed_products["apple"], seed_products["baguette"]
        place_order(db_session, apple, payment_status="paid", total="15.00")
        place_order(db_session, apple, payment_status="paid", total="10.00")
        place_order(db_session, apple, payment_status="pending", total="99.00")
        place_order(db_session, baguette, payment_status="paid", total="13.00")

        response = client.get(f"/api/establishments/{apple.establishment_id}/stats", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "todaySales": "25.00",
            "todayOrders": 3,
            "activeProducts": 3,
            "activeEstablishments": 2,
        }

    def test_yesterday_not_counted(self, db_session, seed_products):
        apple = seed_products["apple"]
        order = place_order(db_session, apple, payment_status="paid")
        order.created_at = utcnow() - timedelta(days=2)
        db_session.commit()

        stats = AdminService(db_session).dashboard_stats(apple.establishment_id)
        assert stats["today_orders"] == 0
        assert str(stats["today_sales"]) == "0.00"

    def test_unknown_establishment(self, client, auth_headers):
        assert client.get("/api/establishments/999/stats", headers=auth_headers).status_code == 404


class TestEstablishmentOrders:
    def test_newest_first(self, client, db_session, auth_headers, seed_products):
        apple = seed_products["apple"]
        first = place_order(db_session, apple)
        second = place_order(db_session, apple)
        first.created_at = utcnow() - timedelta(hours=1)
        db_session.commit()
        place_order(db_session, seed_products["baguette"])

        response = client.get(f"/api/establishments/{apple.establishment_id}/orders", headers=auth_headers)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [second.id, first.id]

    def test_requires_auth(self, client, seed_establishments):
        market, _ = seed_establishments
        assert client.get(f"/api/establishments/{market.id}/orders").status_code == 401

    def test_unknown_establishment(self, client, auth_headers):
        assert client.get("/api/establishments/999/orders", headers=auth_headers).status_code == 404


class TestCreateProduct:
    def product(self, establishment, category, **overrides):
        body = {
            "name": "Pear",
            "price": "7.90",
            "unit": "kg",
            "stock": 5,
            "categoryId": category.id,
            "establishmentId": establishment.id,
        }
        body.update(overrides)
        return body

    def test_create(self, client, auth_headers, seed_establishments, seed_categories):
        market, _ = seed_establishments
        fruits, _, _ = seed_categories

        response = client.post(
            "/api/admin/products", json=self.product(market, fruits), headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Pear"
        assert data["price"] == "7.90"
        assert data["establishmentId"] == market.id
        assert client.get(f"/api/products/{data['id']}").status_code == 200

    def test_category_of_other_establishment(self, client, auth_headers, seed_establishments, seed_categories):
        market, _ = seed_establishments
        _, _, breads = seed_categories

        response = client.post(
            "/api/admin/products", json=self.product(market, breads), headers=auth_headers
        )
        assert response.status_code == 400

    def test_unknown_establishment(self, client, auth_headers, seed_categories):
        fruits, _, _ = seed_categories
        body = {"name": "Pear", "price": "7.90", "categoryId": fruits.id, "establishmentId": 999}
        response = client.post("/api/admin/products", json=body, headers=auth_headers)
        assert response.status_code == 404

    def test_non_positive_price(self, client, auth_headers, seed_establishments, seed_categories):
        market, _ = seed_establishments
        fruits, _, _ = seed_categories
        response = client.post(
            "/api/admin/products", json=self.product(market, fruits, price="0"), headers=auth_headers
        )
        assert response.status_code == 400

    def test_requires_auth(self, client, seed_establishments, seed_categories):
        market, _ = seed_establishments
        fruits, _, _ = seed_categories
        response = client.post("/api/admin/products", json=self.product(market, fruits))
        assert response.status_code == 401
