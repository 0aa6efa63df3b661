from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.catalog.models import Book
from modules.catalog.repositories.django_repository import BookDjangoRepository
from modules.catalog.services import BookService
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer():
    return get_user_model().objects.create_user("reader", password="reader-pass")


@pytest.fixture()
def other_customer():
    return get_user_model().objects.create_user("other", password="other-pass")


@pytest.fixture()
def admin_user():
    return get_user_model().objects.create_user(
        "clerk", password="clerk-pass", is_staff=True
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_book():
    """Factory creating a persisted book with ``is_active`` derived from stock."""

    def _make(title: str = "Dune", price: str = "10.00", stock: int = 5, **extra) -> Book:
        book = Book(
            title=title,
            author=extra.pop("author", "Frank Herbert"),
            price=Decimal(price),
            stock=stock,
            **extra,
        )
        book.refresh_active()
        book.save()
        return book

    return _make


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        book_repository=BookDjangoRepository(),
    )


@pytest.fixture()
def cart_service(order_service):
    return CartService(
        cart_repository=CartDjangoRepository(),
        book_repository=BookDjangoRepository(),
        order_service=order_service,
    )


@pytest.fixture()
def book_service(order_service):
    return BookService(
        repository=BookDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        order_service=order_service,
    )


@pytest.fixture()
def place_order(cart_service):
    """Fill ``user``'s cart with ``(book, qty)`` pairs and check out."""
    from modules.carts.dtos import AddCartLineDTO, CheckoutDTO

    def _place(user, *lines, address: str = "1 Library Lane", key: str | None = None):
        for book, quantity in lines:
            cart_service.add_line(user.pk, AddCartLineDTO(book_id=book.id, quantity=quantity))
        return cart_service.checkout(
            user.pk, CheckoutDTO(shipping_address=address, idempotency_key=key)
        )

    return _place


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid
