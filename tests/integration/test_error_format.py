"""Integration tests for standardized error responses."""

import uuid

import pytest

pytestmark = pytest.mark.integration


class TestStandardizedErrors:
    def test_auth_error_has_standard_format(self, api_client):
        response = api_client.get("/api/v1/books/")
        assert response.status_code == 401
        data = response.json()
        assert data["type"] == "client_error"
        assert isinstance(data["errors"], list)
        assert "code" in data["errors"][0]
        assert "detail" in data["errors"][0]

    def test_malformed_json(self, admin_client):
        response = admin_client.post(
            "/api/v1/books/", data="{", content_type="application/json"
        )
        assert response.status_code == 400
        assert response.json()["type"] == "client_error"

    def test_validation_errors_name_the_field(self, admin_client):
        response = admin_client.post("/api/v1/books/", {"title": "X"}, format="json")
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "validation_error"
        assert {"author", "price"} <= {error["attr"] for error in data["errors"]}

    def test_domain_errors_carry_a_code(self, admin_client):
        response = admin_client.post(f"/api/v1/orders/{uuid.uuid4()}/reject/")
        assert response.status_code == 404
        assert response.json() == {
            "detail": response.json()["detail"],
            "code": "not_found",
        }

    def test_unknown_route_is_404(self, customer_client):
        response = customer_client.get("/api/v1/books/not-a-uuid/")
        assert response.status_code == 404
