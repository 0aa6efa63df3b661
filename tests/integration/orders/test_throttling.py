"""Integration tests for throttling on checkout and order decisions."""

from __future__ import annotations

import pytest
from django.conf import settings

pytestmark = pytest.mark.integration


def _limit(scope: str) -> int:
    return int(settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"][scope].split("/")[0])


def test_checkout_is_throttled(customer_client):
    payload = {"shipping_address": "1 Library Lane"}
    for _ in range(_limit("checkout")):
        # Empty cart: rejected by the service but still counted.
        response = customer_client.post("/api/v1/cart/checkout/", payload, format="json")
        assert response.status_code == 400

    response = customer_client.post("/api/v1/cart/checkout/", payload, format="json")
    assert response.status_code == 429


def test_cart_reads_use_the_general_limit(customer_client):
    for _ in range(_limit("checkout") + 1):
        assert customer_client.get("/api/v1/cart/").status_code == 200
