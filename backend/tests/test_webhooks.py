"""
Tests for provider webhook reconciliation.
"""

import hashlib
import hmac
import json

import pytest

from rest_api.models import Order, ProductSales
from rest_api.services.domain import OrderService
from rest_api.services.payments import WebhookOutcome, WebhookReconciler, parse_event, verify_signature
from rest_api.services.payments.webhook_reconciler import extract_references
from shared.config.settings import settings
from shared.utils.exceptions import AuthError, ValidationError
from shared.utils.schemas import CreateOrderRequest
from tests.conftest import order_body

WEBHOOK_URL = "/api/payment-provider/webhook"


@pytest.fixture
def remote_order(db_session, seed_products):
    """A pending order known to the provider as or_abc / ch_abc."""
    apple = seed_products["apple"]
    request = CreateOrderRequest.model_validate(
        order_body(
            apple.establishment_id,
            [{"productId": apple.id, "quantity": 2, "price": "10.00"}],
            totalAmount="25.00",
        )
    )
    return OrderService(db_session).create_order(
        request.order,
        request.items,
        external_order_ref="or_abc",
        external_transaction_ref="ch_abc",
    )


def event(event_type: str, order_id: str = "or_abc", charge_id: str = "ch_abc") -> dict:
    return {
        "id": "hook_1",
        "type": event_type,
        "data": {"id": order_id, "status": "paid", "charges": [{"id": charge_id}]},
    }


class TestReferences:
    def test_order_event(self):
        assert extract_references({"id": "or_1", "charges": [{"id": "ch_1"}]}) == ["or_1", "ch_1"]

    def test_charge_event(self):
        data = {"id": "ch_1", "order": {"id": "or_1"}}
        assert extract_references(data) == ["or_1", "ch_1"]

    def test_no_references(self):
        assert extract_references({"status": "paid"}) == []


class TestParseEvent:
    @pytest.mark.parametrize("body", [[], "order.paid", {"type": "order.paid"}, {"data": {}}, {"type": "", "data": {}}])
    def test_malformed(self, body):
        with pytest.raises(ValidationError):
            parse_event(body)

    def test_valid(self):
        assert parse_event(event("order.paid"))[0] == "order.paid"


class TestSignature:
    def test_skipped_without_secret(self):
        verify_signature(b"{}", None, secret="")

    def test_valid_signature(self):
        digest = hmac.new(b"s3cret", b"{}", hashlib.sha1).hexdigest()
        verify_signature(b"{}", f"sha1={digest}", secret="s3cret")

    @pytest.mark.parametrize("signature", [None, "", "sha1=deadbeef", "sha256=abc", "nonsense"])
    def test_rejected(self, signature):
        with pytest.raises(AuthError):
            verify_signature(b"{}", signature, secret="s3cret")


class TestReconciler:
    def test_paid_event_updates(self, db_session, remote_order):
        outcome = WebhookReconciler(db_session).handle("order.paid", event("order.paid")["data"])
        assert outcome == WebhookOutcome.UPDATED
        db_session.refresh(remote_order)
        assert remote_order.payment_status == "paid"

    def test_redelivery_is_unchanged(self, db_session, remote_order):
        reconciler = WebhookReconciler(db_session)
        data = event("order.paid")["data"]
        reconciler.handle("order.paid", data)
        db_session.refresh(remote_order)
        updated_at = remote_order.updated_at

        assert reconciler.handle("order.paid", data) == WebhookOutcome.UNCHANGED
        db_session.refresh(remote_order)
        assert remote_order.updated_at == updated_at

    def test_matches_by_charge_id(self, db_session, remote_order):
        data = {"id": "ch_abc", "status": "failed"}
        outcome = WebhookReconciler(db_session).handle("charge.payment_failed", data)
        assert outcome == WebhookOutcome.UPDATED
        db_session.refresh(remote_order)
        assert remote_order.payment_status == "failed"

    def test_unknown_reference(self, db_session, remote_order):
        data = event("order.paid", order_id="or_zzz", charge_id="ch_zzz")["data"]
        assert WebhookReconciler(db_session).handle("order.paid", data) == WebhookOutcome.UNKNOWN_REFERENCE
        db_session.refresh(remote_order)
        assert remote_order.payment_status == "pending"

    def test_last_event_wins(self, db_session, remote_order):
        reconciler = WebhookReconciler(db_session)
        reconciler.handle("order.paid", event("order.paid")["data"])
        reconciler.handle("order.payment_failed", event("order.payment_failed")["data"])
        db_session.refresh(remote_order)
        assert remote_order.payment_status == "failed"

    def test_unknown_event_type_maps_to_pending(self, db_session, remote_order):
        reconciler = WebhookReconciler(db_session)
        reconciler.handle("order.paid", event("order.paid")["data"])
        assert reconciler.handle("order.updated", event("order.updated")["data"]) == WebhookOutcome.UPDATED
        db_session.refresh(remote_order)
        assert remote_order.payment_status == "pending"

    def test_sales_untouched(self, db_session, remote_order, seed_products):
        before = db_session.query(ProductSales).filter_by(product_id=seed_products["apple"].id).one()
        assert before.quantity_sold == 2

        WebhookReconciler(db_session).handle("order.payment_failed", event("order.payment_failed")["data"])

        db_session.refresh(before)
        assert before.quantity_sold == 2

    def test_internal_failure_is_acknowledged(self, db_session, remote_order, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("db gone")

        monkeypatch.setattr(OrderService, "apply_payment_status", boom)
        outcome = WebhookReconciler(db_session).handle("order.paid", event("order.paid")["data"])
        assert outcome == WebhookOutcome.ERROR

    def test_payload_without_references(self, db_session):
        with pytest.raises(ValidationError):
            WebhookReconciler(db_session).handle("order.paid", {"status": "paid"})


class TestWebhookRoute:
    def test_paid(self, client, db_session, remote_order):
        response = client.post(WEBHOOK_URL, json=event("order.paid"))
        assert response.status_code == 200
        assert response.json() == {"received": True, "outcome": "updated"}
        assert db_session.get(Order, remote_order.id).payment_status == "paid"

    def test_unknown_reference_acknowledged(self, client, seed_products):
        response = client.post(WEBHOOK_URL, json=event("order.paid", "or_nope", "ch_nope"))
        assert response.status_code == 200
        assert response.json()["outcome"] == "unknown_reference"

    def test_malformed_payload(self, client):
        response = client.post(WEBHOOK_URL, json={"hello": "world"})
        assert response.status_code == 400

    def test_invalid_json(self, client):
        response = client.post(
            WEBHOOK_URL, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    def test_signature_enforced(self, client, remote_order, monkeypatch):
        monkeypatch.setattr(settings, "pagarme_webhook_secret", "whsec")
        raw = json.dumps(event("order.paid")).encode()

        response = client.post(
            WEBHOOK_URL,
            content=raw,
            headers={"Content-Type": "application/json", "X-Hub-Signature": "sha1=bad"},
        )
        assert response.status_code == 401

        digest = hmac.new(b"whsec", raw, hashlib.sha1).hexdigest()
        response = client.post(
            WEBHOOK_URL,
            content=raw,
            headers={"Content-Type": "application/json", "X-Hub-Signature": f"sha1={digest}"},
        )
        assert response.status_code == 200
        assert response.json()["outcome"] == "updated"
