"""
Tests for the orders API.
"""

from decimal import Decimal

from rest_api.models import Order, ProductSales
from rest_api.services.payments import PaymentIntent, get_intent_gateway
from rest_api.main import app
from tests.conftest import order_body


def items_for(*pairs):
    return [{"productId": p.id, "quantity": q, "price": str(p.price)} for p, q in pairs]


class TestCreateOrder:
    def test_create_order(self, client, seed_products):
        apple, banana = seed_products["apple"], seed_products["banana"]
        response = client.post(
            "/api/orders",
            json=order_body(apple.establishment_id, items_for((apple, 2), (banana, 1))),
        )
        assert response.status_code == 201, response.json()
        data = response.json()
        assert data["paymentStatus"] == "pending"
        assert data["orderStatus"] == "processing"
        assert data["deliveryAddress"]["zipCode"] == "01310-100"
        assert Decimal(data["totalAmount"]) == Decimal("29.00")

    def test_missing_customer_name_is_400(self, client, seed_products):
        apple = seed_products["apple"]
        response = client.post(
            "/api/orders",
            json=order_body(apple.establishment_id, items_for((apple, 1)), customerName=""),
        )
        assert response.status_code == 400
        assert "customerName" in response.json()["detail"]

    def test_invalid_payment_method_is_400(self, client, seed_products):
        apple = seed_products["apple"]
        response = client.post(
            "/api/orders",
            json=order_body(apple.establishment_id, items_for((apple, 1)), paymentMethod="cash"),
        )
        assert response.status_code == 400

    def test_zero_quantity_is_400(self, client, seed_products, db_session):
        apple = seed_products["apple"]
        body = order_body(apple.establishment_id, [{"productId": apple.id, "quantity": 0, "price": "10.00"}])
        response = client.post("/api/orders", json=body)
        assert response.status_code == 400
        assert db_session.query(Order).count() == 0

    def test_empty_items_is_400(self, client, seed_products):
        response = client.post("/api/orders", json=order_body(seed_products["apple"].establishment_id, []))
        assert response.status_code == 400

    def test_cross_establishment_item_is_400(self, client, seed_products, db_session):
        apple, baguette = seed_products["apple"], seed_products["baguette"]
        response = client.post(
            "/api/orders",
            json=order_body(apple.establishment_id, items_for((apple, 1), (baguette, 1))),
        )
        assert response.status_code == 400
        assert "Item 1" in response.json()["detail"]
        assert db_session.query(Order).count() == 0
        assert db_session.query(ProductSales).count() == 0

    def test_unknown_establishment_is_404(self, client, seed_products):
        response = client.post("/api/orders", json=order_body(999, items_for((seed_products["apple"], 1))))
        assert response.status_code == 404


class TestGetOrder:
    def test_order_detail_includes_items_and_products(self, client, seed_products):
        apple = seed_products["apple"]
        created = client.post(
            "/api/orders", json=order_body(apple.establishment_id, items_for((apple, 2)))
        ).json()

        response = client.get(f"/api/orders/{created['id']}")
        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 1
        assert data["items"][0]["product"]["name"] == "Apple"
        assert data["items"][0]["product"]["categoryName"] == "Fruits"

    def test_unknown_order_is_404(self, client):
        assert client.get("/api/orders/12345").status_code == 404


class TestStatusRoutes:
    def _create(self, client, seed_products):
        apple = seed_products["apple"]
        return client.post(
            "/api/orders", json=order_body(apple.establishment_id, items_for((apple, 1)))
        ).json()

    def test_patch_status(self, client, seed_products):
        order = self._create(client, seed_products)
        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "delivering"})
        assert response.status_code == 200
        assert response.json()["orderStatus"] == "delivering"

    def test_patch_unknown_status_is_400(self, client, seed_products):
        order = self._create(client, seed_products)
        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "teleported"})
        assert response.status_code == 400

    def test_payment_success_marks_paid(self, client, seed_products):
        order = self._create(client, seed_products)
        response = client.post(
            f"/api/orders/{order['id']}/payment-success", json={"paymentIntentId": "pi_123"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["paymentStatus"] == "paid"
        assert data["externalTransactionRef"] == "pi_123"

        again = client.post(
            f"/api/orders/{order['id']}/payment-success", json={"paymentIntentId": "pi_123"}
        )
        assert again.status_code == 200
        assert again.json()["paymentStatus"] == "paid"

    def test_payment_success_verified_with_processor(self, client, seed_products, monkeypatch):
        from shared.config.settings import settings

        class UnpaidGateway:
            async def retrieve_payment_intent(self, intent_id):
                return PaymentIntent(
                    id=intent_id, client_secret=None, amount=1000, currency="brl", status="pending"
                )

        monkeypatch.setattr(settings, "stripe_verify_payment_success", True)
        app.dependency_overrides[get_intent_gateway] = lambda: UnpaidGateway()

        order = self._create(client, seed_products)
        response = client.post(
            f"/api/orders/{order['id']}/payment-success", json={"paymentIntentId": "pi_123"}
        )
        assert response.status_code == 400
        assert client.get(f"/api/orders/{order['id']}").json()["paymentStatus"] == "pending"

    def test_payment_success_unknown_order_is_404(self, client):
        response = client.post("/api/orders/999/payment-success", json={"paymentIntentId": "pi_1"})
        assert response.status_code == 404
