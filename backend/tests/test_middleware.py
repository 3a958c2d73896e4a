"""
Tests for HTTP middlewares: security headers, content type, correlation id.
"""


class TestSecurityHeaders:
    def test_json_responses_carry_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]

    def test_no_hsts_outside_production(self, client):
        response = client.get("/api/health")
        assert "Strict-Transport-Security" not in response.headers


class TestContentTypeValidation:
    def test_form_body_rejected_with_415(self, client, seed_products):
        response = client.post(
            "/api/orders",
            content=b"a=b",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert response.status_code == 415

    def test_webhook_is_exempt(self, client):
        response = client.post(
            "/api/payment-provider/webhook",
            content=b"not json",
            headers={"Content-Type": "text/plain"},
        )
        # Reaches the handler, which rejects the body itself
        assert response.status_code == 400


class TestCorrelationId:
    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "test-request-123"})
        assert response.headers["X-Request-ID"] == "test-request-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/api/health")
        assert response.headers.get("X-Request-ID")
