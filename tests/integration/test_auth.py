"""Integration tests for SimpleJWT authentication.

Validates:
  - /health is public (plain Django view, no DRF).
  - API endpoints return 401 without or with a bad token.
  - A token obtained from /api/v1/auth/token/ grants access.
  - Staff-only endpoints return 403 for customers.
"""

import pytest

pytestmark = pytest.mark.integration

TOKEN_URL = "/api/v1/auth/token/"


def _token(api_client, username: str, password: str) -> str:
    response = api_client.post(
        TOKEN_URL, {"username": username, "password": password}, format="json"
    )
    assert response.status_code == 200
    return response.json()["access"]


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProtectedEndpoints:
    def test_no_token_returns_401(self, api_client):
        assert api_client.get("/api/v1/books/").status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        assert api_client.get("/api/v1/books/").status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        assert api_client.get("/api/v1/cart/").status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")


class TestTokenFlow:
    def test_wrong_password(self, api_client, customer):
        response = api_client.post(
            TOKEN_URL, {"username": "reader", "password": "nope"}, format="json"
        )
        assert response.status_code == 401

    def test_customer_token_grants_access(self, api_client, customer):
        access = _token(api_client, "reader", "reader-pass")
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        assert api_client.get("/api/v1/cart/").status_code == 200

    def test_customer_token_cannot_approve(self, api_client, customer):
        access = _token(api_client, "reader", "reader-pass")
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        assert api_client.get("/api/v1/reports/sales-summary/").status_code == 403

    def test_staff_token_reads_reports(self, api_client, admin_user):
        access = _token(api_client, "clerk", "clerk-pass")
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        assert api_client.get("/api/v1/reports/sales-summary/").status_code == 200
