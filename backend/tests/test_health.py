"""
Tests for health check endpoints.
"""


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "rest-api"

    def test_detailed_health_reports_database_and_breakers(self, client):
        response = client.get("/api/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert data["dependencies"]["database"]["status"] == "healthy"
        assert set(data["circuit_breakers"]) == {"stripe", "pagarme"}
        assert data["circuit_breakers"]["stripe"]["state"] == "closed"
