"""Unit tests for OrderDjangoRepository.

Covers:
- Aggregate creation (Order + OrderLines) with captured prices.
- Read with prefetch_related and invalid ids.
- Idempotency key look-up.
- Conditional status transition (compare-and-swap on ``pending``).
- Removing a book's lines keeps the captured total.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.dtos import OrderLineDraft, PlaceOrderDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.repositories.interfaces import IOrderRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def books(make_book):
    return make_book(title="A", price="10.00"), make_book(title="B", price="5.00")


@pytest.fixture()
def dto(customer, books):
    a, b = books
    return PlaceOrderDTO(
        customer_id=customer.pk,
        lines=[
            OrderLineDraft(book_id=a.id, quantity=2, unit_price=a.price),
            OrderLineDraft(book_id=b.id, quantity=1, unit_price=b.price),
        ],
        shipping_address="1 Library Lane",
        idempotency_key="order-key-1",
    )


# ===========================================================================
# Create / read
# ===========================================================================


class TestCreate:
    def test_is_repository(self, repo):
        assert isinstance(repo, IOrderRepository)

    def test_creates_pending_order_with_lines(self, repo, dto):
        order = repo.create(dto)

        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.payment_method == "cod"
        assert order.total_amount == Decimal("25.00")
        assert order.order_number.startswith("ORD-")
        assert order.lines.count() == 2

    def test_captured_price_survives_price_change(self, repo, dto, books):
        order = repo.create(dto)
        a, _ = books
        a.price = Decimal("99.00")
        a.save()

        line = order.lines.get(book_id=a.id)
        assert line.unit_price == Decimal("10.00")


class TestRead:
    def test_get_by_id(self, repo, dto):
        order = repo.create(dto)
        fetched = repo.get_by_id(str(order.id))
        assert fetched.id == order.id
        assert len(fetched.lines.all()) == 2

    def test_get_by_invalid_id(self, repo):
        assert repo.get_by_id("not-a-uuid") is None
        assert repo.get_for_update("not-a-uuid") is None

    def test_idempotency_key(self, repo, dto):
        order = repo.create(dto)
        assert repo.get_by_idempotency_key("order-key-1").id == order.id
        assert repo.get_by_idempotency_key("missing") is None

    def test_list_filters(self, repo, dto, customer):
        order = repo.create(dto)
        assert list(repo.list({"customer_id": customer.pk})) == [order]
        assert list(repo.list({"status": OrderStatus.REJECTED})) == []


# ===========================================================================
# Transition
# ===========================================================================


class TestTransition:
    def test_pending_order_transitions(self, repo, dto):
        order = repo.create(dto)

        assert repo.transition(order, OrderStatus.DELIVERED, payment_status=PaymentStatus.PAID)

        assert order.status == OrderStatus.DELIVERED
        stored = Order.objects.get(id=order.id)
        assert stored.status == OrderStatus.DELIVERED
        assert stored.payment_status == PaymentStatus.PAID
        assert stored.decided_at is not None

    def test_stale_instance_loses(self, repo, dto):
        order = repo.create(dto)
        stale = Order.objects.get(id=order.id)
        assert repo.transition(order, OrderStatus.REJECTED)

        assert not repo.transition(stale, OrderStatus.DELIVERED)
        assert stale.status == OrderStatus.PENDING
        assert Order.objects.get(id=order.id).status == OrderStatus.REJECTED


class TestRemoveBookLines:
    def test_total_kept_as_captured(self, repo, dto, books):
        order = repo.create(dto)
        a, _ = books

        assert repo.remove_book_lines(order, a.id) == 1

        order.refresh_from_db()
        assert order.total_amount == Decimal("25.00")
        assert order.lines.count() == 1
