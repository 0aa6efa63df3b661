"""Integration tests for the reporting endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

pytestmark = pytest.mark.integration

SUMMARY_URL = "/api/v1/reports/sales-summary/"
REVENUE_URL = "/api/v1/reports/revenue/"


@pytest.fixture()
def sales(customer, make_book, place_order, order_service):
    a = make_book(title="A", price="10.00", stock=10)
    b = make_book(title="B", price="5.00", stock=10)
    delivered = place_order(customer, (a, 2), (b, 1))
    place_order(customer, (b, 3))
    order_service.approve_order(delivered.id)
    return a, b


class TestSalesSummary:
    def test_staff_only(self, customer_client):
        assert customer_client.get(SUMMARY_URL).status_code == 403

    def test_default_summary(self, admin_client, sales):
        a, _ = sales
        data = admin_client.get(SUMMARY_URL).json()

        assert data["total_orders"] == 1
        assert data["total_revenue"] == "25.00"
        assert data["average_order_value"] == "25.00"
        assert data["payment_statuses"] == ["paid"]
        assert data["top_books"][0] == {
            "book_id": str(a.id),
            "title": "A",
            "quantity": 2,
            "revenue": "20.00",
        }

    def test_repeatable_payment_status(self, admin_client, sales):
        data = admin_client.get(
            f"{SUMMARY_URL}?payment_status=paid&payment_status=pending"
        ).json()
        assert data["total_orders"] == 2
        assert data["total_revenue"] == "25.00"
        assert data["average_order_value"] == "12.50"

    def test_window(self, admin_client, sales):
        yesterday = (timezone.localdate() - timedelta(days=1)).isoformat()
        data = admin_client.get(SUMMARY_URL, {"end": yesterday}).json()
        assert data["total_orders"] == 0

    def test_inverted_window(self, admin_client):
        today = timezone.localdate()
        response = admin_client.get(
            SUMMARY_URL,
            {"start": today.isoformat(), "end": (today - timedelta(days=1)).isoformat()},
        )
        assert response.status_code == 400

    def test_unknown_payment_status(self, admin_client):
        assert admin_client.get(SUMMARY_URL, {"payment_status": "refunded"}).status_code == 400


class TestRevenue:
    def test_series(self, admin_client, sales):
        data = admin_client.get(REVENUE_URL, {"days": 7}).json()

        assert len(data) == 7
        assert data[-1]["day"] == timezone.localdate().isoformat()
        assert data[-1]["revenue"] == "25.00"
        assert data[-1]["order_count"] == 1
        assert all(point["revenue"] == "0.00" for point in data[:-1])

    def test_days_bounds(self, admin_client):
        assert admin_client.get(REVENUE_URL, {"days": 0}).status_code == 400
