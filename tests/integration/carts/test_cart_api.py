"""Integration tests for the cart and checkout API.

Covers:
- Cart lines: add, merge, update, remove, clear.
- Advisory stock and availability checks when adding.
- Checkout: pending order with captured prices, cart emptied, stock kept.
- Checkout errors: empty cart, sold-out books, blank address.
- Idempotency-Key replays and conflicts.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

CART_URL = "/api/v1/cart/"
LINES_URL = "/api/v1/cart/lines/"
CHECKOUT_URL = "/api/v1/cart/checkout/"


def _add(client, book, quantity=1):
    return client.post(LINES_URL, {"book_id": str(book.id), "quantity": quantity}, format="json")


def _checkout(client, key=None, address="1 Library Lane"):
    headers = {"HTTP_IDEMPOTENCY_KEY": key} if key else {}
    return client.post(CHECKOUT_URL, {"shipping_address": address}, format="json", **headers)


# ===========================================================================
# Lines
# ===========================================================================


class TestCartLines:
    def test_new_cart_is_empty(self, customer_client):
        data = customer_client.get(CART_URL).json()
        assert data["lines"] == []
        assert data["subtotal"] == "0.00"

    def test_add_and_merge(self, customer_client, make_book):
        book = make_book(price="7.50", stock=5)

        assert _add(customer_client, book, 1).status_code == 201
        data = _add(customer_client, book, 2).json()

        assert len(data["lines"]) == 1
        line = data["lines"][0]
        assert line["quantity"] == 3
        assert line["unit_price"] == "7.50"
        assert line["subtotal"] == "22.50"
        assert data["item_count"] == 3

    def test_add_more_than_stock(self, customer_client, make_book):
        book = make_book(stock=2)
        response = _add(customer_client, book, 3)
        assert response.status_code == 409
        assert response.json()["code"] == "insufficient_stock"

    def test_add_sold_out_book(self, customer_client, make_book):
        response = _add(customer_client, make_book(stock=0))
        assert response.status_code == 409
        assert response.json()["code"] == "insufficient_stock"

    def test_add_book_taken_off_sale(self, customer_client, make_book):
        response = _add(customer_client, make_book(stock=5, manually_deactivated=True))
        assert response.status_code == 404

    def test_add_unknown_book(self, customer_client):
        response = customer_client.post(
            LINES_URL, {"book_id": str(uuid.uuid4())}, format="json"
        )
        assert response.status_code == 404

    def test_update_and_remove(self, customer_client, make_book):
        book = make_book(stock=5)
        _add(customer_client, book)
        url = f"{LINES_URL}{book.id}/"

        updated = customer_client.patch(url, {"quantity": 4}, format="json")
        assert updated.json()["lines"][0]["quantity"] == 4

        removed = customer_client.patch(url, {"quantity": 0}, format="json")
        assert removed.json()["lines"] == []

    def test_update_missing_line(self, customer_client, make_book):
        book = make_book()
        response = customer_client.patch(f"{LINES_URL}{book.id}/", {"quantity": 1}, format="json")
        assert response.status_code == 404

    def test_delete_line_and_clear(self, customer_client, make_book):
        a = make_book(title="A")
        b = make_book(title="B")
        _add(customer_client, a)
        _add(customer_client, b)

        after_delete = customer_client.delete(f"{LINES_URL}{a.id}/").json()
        assert [line["title"] for line in after_delete["lines"]] == ["B"]

        assert customer_client.delete(CART_URL).json()["lines"] == []

    def test_carts_are_per_user(self, customer_client, admin_client, make_book):
        _add(customer_client, make_book())
        assert admin_client.get(CART_URL).json()["lines"] == []


# ===========================================================================
# Checkout
# ===========================================================================


class TestCheckout:
    def test_checkout_creates_pending_order(self, customer_client, customer, make_book):
        a = make_book(title="A", price="10.00", stock=5)
        b = make_book(title="B", price="5.00", stock=1)
        _add(customer_client, a, 2)
        _add(customer_client, b, 1)

        response = _checkout(customer_client)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == OrderStatus.PENDING
        assert data["payment_status"] == PaymentStatus.PENDING
        assert data["total_amount"] == "25.00"
        assert len(data["lines"]) == 2
        assert customer_client.get(CART_URL).json()["lines"] == []
        a.refresh_from_db()
        assert a.stock == 5

    def test_price_captured_at_checkout(self, customer_client, make_book):
        book = make_book(price="10.00")
        _add(customer_client, book)
        order_id = _checkout(customer_client).json()["id"]

        book.price = Decimal("20.00")
        book.save()

        order = Order.objects.get(id=order_id)
        assert str(order.lines.get().unit_price) == "10.00"

    def test_empty_cart(self, customer_client):
        response = _checkout(customer_client)
        assert response.status_code == 400
        assert response.json()["code"] == "empty_cart"

    def test_blank_address(self, customer_client, make_book):
        _add(customer_client, make_book())
        response = _checkout(customer_client, address="   ")
        assert response.status_code == 400
        assert not Order.objects.exists()

    def test_sold_out_since_added(self, customer_client, make_book):
        book = make_book(stock=3)
        _add(customer_client, book, 3)
        book.stock = 1
        book.save()

        response = _checkout(customer_client)

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "insufficient_stock"
        assert body["shortfalls"][0]["book_id"] == str(book.id)
        assert body["shortfalls"][0]["available"] == 1
        assert len(customer_client.get(CART_URL).json()["lines"]) == 1

    def test_book_emptied_since_added(self, customer_client, make_book):
        book = make_book(stock=2)
        _add(customer_client, book, 1)
        book.stock = 0
        book.refresh_active()
        book.save()

        response = _checkout(customer_client)

        assert response.status_code == 409
        assert response.json()["shortfalls"][0]["available"] == 0


class TestIdempotency:
    def test_replay_returns_same_order(self, customer_client, make_book):
        book = make_book(stock=5)
        _add(customer_client, book, 2)

        first = _checkout(customer_client, key="checkout-1")
        _add(customer_client, book, 1)
        second = _checkout(customer_client, key="checkout-1")

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert Order.objects.count() == 1
        # The replay leaves the cart alone.
        assert len(customer_client.get(CART_URL).json()["lines"]) == 1

    def test_key_used_by_another_customer(
        self, customer_client, admin_client, make_book
    ):
        book = make_book(stock=5)
        _add(customer_client, book)
        _checkout(customer_client, key="shared-key")
        _add(admin_client, book)

        response = _checkout(admin_client, key="shared-key")

        assert response.status_code == 409
        assert response.json()["code"] == "idempotency_conflict"
