"""Unit tests for ``BookService``.

Covers:
- Create / update / restock keep ``is_active`` consistent with stock.
- ``set_active`` pins a book off sale; the pin survives restocking.
- ``get_book`` raises ``BookNotFound`` for missing and deleted books.
- ``delete_book`` cleans carts and pending orders in one step.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.carts.models import CartLine
from modules.catalog.dtos import CreateBookDTO, UpdateBookDTO
from modules.catalog.exceptions import BookNotFound
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.services import EMPTIED_BY_CATALOG_NOTE

pytestmark = pytest.mark.unit


# ===========================================================================
# Create / Update
# ===========================================================================


class TestCreateAndUpdate:
    def test_create_with_stock_is_active(self, book_service):
        book = book_service.create_book(
            CreateBookDTO(title="Emma", author="Jane Austen", price=Decimal("9.90"), stock=3)
        )
        assert book.is_active
        assert book.stock == 3

    def test_create_without_stock_is_inactive(self, book_service):
        book = book_service.create_book(
            CreateBookDTO(title="Emma", author="Jane Austen", price=Decimal("9.90"))
        )
        assert book.is_active is False

    def test_update_stock_to_zero_deactivates(self, book_service, make_book):
        book = make_book(stock=4)
        updated = book_service.update_book(str(book.id), UpdateBookDTO(stock=0))
        assert updated.is_active is False

    def test_update_only_touches_given_fields(self, book_service, make_book):
        book = make_book(title="Old", price="10.00")
        updated = book_service.update_book(str(book.id), UpdateBookDTO(title="New"))
        assert updated.title == "New"
        assert updated.price == Decimal("10.00")

    def test_update_unknown_book(self, book_service):
        with pytest.raises(BookNotFound):
            book_service.update_book(str(uuid.uuid4()), UpdateBookDTO(title="X"))


# ===========================================================================
# Activation / Restock
# ===========================================================================


class TestActivation:
    def test_restock_reactivates_sold_out_book(self, book_service, make_book):
        book = make_book(stock=0)
        restocked = book_service.restock(str(book.id), 5)
        assert restocked.stock == 5
        assert restocked.is_active

    def test_manual_pin_survives_restock(self, book_service, make_book):
        book = make_book(stock=2)
        book_service.set_active(str(book.id), False)
        restocked = book_service.restock(str(book.id), 10)
        assert restocked.stock == 12
        assert restocked.is_active is False
        assert restocked.manually_deactivated

    def test_clearing_pin_reactivates_when_in_stock(self, book_service, make_book):
        book = make_book(stock=2)
        book_service.set_active(str(book.id), False)
        reactivated = book_service.set_active(str(book.id), True)
        assert reactivated.is_active
        assert reactivated.manually_deactivated is False

    def test_clearing_pin_without_stock_stays_inactive(self, book_service, make_book):
        book = make_book(stock=0)
        result = book_service.set_active(str(book.id), True)
        assert result.is_active is False

    def test_restock_rejects_non_positive_quantity(self, book_service, make_book):
        book = make_book()
        with pytest.raises(ValueError):
            book_service.restock(str(book.id), 0)


# ===========================================================================
# Queries
# ===========================================================================


class TestGetBook:
    def test_get_existing(self, book_service, make_book):
        book = make_book()
        assert book_service.get_book(str(book.id)).id == book.id

    def test_get_deleted_raises(self, book_service, make_book):
        book = make_book()
        book.delete()
        with pytest.raises(BookNotFound):
            book_service.get_book(str(book.id))

    def test_inactive_book_is_still_returned(self, book_service, make_book):
        book = make_book(stock=0)
        assert book_service.get_book(str(book.id)).is_active is False


# ===========================================================================
# Deletion
# ===========================================================================


class TestDeleteBook:
    def test_delete_removes_cart_lines(
        self, book_service, cart_service, customer, make_book
    ):
        from modules.carts.dtos import AddCartLineDTO

        book = make_book()
        cart_service.add_line(customer.pk, AddCartLineDTO(book_id=book.id, quantity=1))

        book_service.delete_book(str(book.id))

        assert not CartLine.objects.filter(book_id=book.id).exists()
        with pytest.raises(BookNotFound):
            book_service.get_book(str(book.id))

    def test_delete_keeps_captured_order_total(
        self, book_service, customer, make_book, place_order
    ):
        kept = make_book(title="Kept", price="10.00")
        dropped = make_book(title="Dropped", price="5.00")
        order = place_order(customer, (kept, 2), (dropped, 1))
        assert order.total_amount == Decimal("25.00")

        book_service.delete_book(str(dropped.id))

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("25.00")
        assert [line.book_id for line in order.lines.all()] == [kept.id]

    def test_delete_rejects_order_left_empty(
        self, book_service, customer, make_book, place_order
    ):
        only = make_book(price="7.00")
        order = place_order(customer, (only, 1))

        book_service.delete_book(str(only.id))

        order.refresh_from_db()
        assert order.status == OrderStatus.REJECTED
        assert order.payment_status == PaymentStatus.PENDING
        rejection = order.status_history.get(new_status=OrderStatus.REJECTED)
        assert rejection.notes == EMPTIED_BY_CATALOG_NOTE

    def test_delete_leaves_decided_orders_alone(
        self, book_service, order_service, customer, make_book, place_order
    ):
        book = make_book(price="4.00", stock=5)
        order = place_order(customer, (book, 2))
        order_service.approve_order(order.id)

        book_service.delete_book(str(book.id))

        order.refresh_from_db()
        assert order.status == OrderStatus.DELIVERED
        assert order.total_amount == Decimal("8.00")
        assert order.lines.count() == 1

    def test_delete_unknown_book(self, book_service):
        with pytest.raises(BookNotFound):
            book_service.delete_book(str(uuid.uuid4()))
