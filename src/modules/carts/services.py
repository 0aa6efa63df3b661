"""Cart service layer (Use Cases).

Cart edits check the catalog as it is right now; the check is advisory
because nothing is reserved until an administrator approves the order.
``checkout`` is the only way an order comes into existence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List
from uuid import UUID

import structlog
from django.db import transaction

from modules.carts.exceptions import CartLineNotFound, EmptyCart, IdempotencyKeyConflict
from modules.carts.models import CartLine
from modules.catalog.exceptions import BookNotFound, InsufficientStock, StockShortfall
from modules.orders.dtos import OrderLineDraft, PlaceOrderDTO

if TYPE_CHECKING:
    from modules.carts.dtos import AddCartLineDTO, CheckoutDTO, UpdateCartLineDTO
    from modules.carts.models import Cart
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.catalog.models import Book
    from modules.catalog.repositories.interfaces import IBookRepository
    from modules.orders.models import Order
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)


class CartService:
    """Application service for the Cart aggregate."""

    def __init__(
        self,
        cart_repository: ICartRepository,
        book_repository: IBookRepository,
        order_service: OrderService,
    ) -> None:
        self._cart_repo = cart_repository
        self._book_repo = book_repository
        self._order_service = order_service

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cart(self, customer_id: int) -> Cart:
        return self._cart_repo.get_for_customer(customer_id)

    # ------------------------------------------------------------------
    # Line edits
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_line(self, customer_id: int, dto: AddCartLineDTO) -> Cart:
        """Add ``dto.quantity`` copies of a book, merging with an existing line.

        Raises:
            BookNotFound: the book is missing, deleted or taken off sale.
            InsufficientStock: the requested quantity exceeds current stock,
                including a sold-out book.
        """
        cart = self._cart_repo.get_for_update(customer_id)
        book = self._orderable_book(dto.book_id)
        _ensure_in_stock(book, dto.quantity)

        line = self._cart_repo.get_line(cart, book.id)
        if line is None:
            line = CartLine(cart=cart, book=book, quantity=dto.quantity)
        else:
            line.quantity += dto.quantity
        self._cart_repo.save_line(line)

        logger.info(
            "cart.line_added",
            customer_id=customer_id,
            book_id=str(book.id),
            quantity=line.quantity,
        )
        return self._cart_repo.get_for_customer(customer_id)

    @transaction.atomic
    def update_line(self, customer_id: int, dto: UpdateCartLineDTO) -> Cart:
        """Set a line's quantity; a quantity of zero or less removes the line.

        Raises:
            CartLineNotFound: positive quantity for a book not in the cart.
            BookNotFound: the book is missing, deleted or taken off sale.
            InsufficientStock: the quantity exceeds current stock.
        """
        cart = self._cart_repo.get_for_update(customer_id)
        if dto.quantity <= 0:
            self._cart_repo.delete_line(cart, dto.book_id)
            logger.info(
                "cart.line_removed", customer_id=customer_id, book_id=str(dto.book_id)
            )
            return self._cart_repo.get_for_customer(customer_id)

        line = self._cart_repo.get_line(cart, dto.book_id)
        if line is None:
            raise CartLineNotFound(f"Book {dto.book_id} is not in the cart.")
        book = self._orderable_book(dto.book_id)
        _ensure_in_stock(book, dto.quantity)

        line.quantity = dto.quantity
        self._cart_repo.save_line(line)
        logger.info(
            "cart.line_updated",
            customer_id=customer_id,
            book_id=str(dto.book_id),
            quantity=dto.quantity,
        )
        return self._cart_repo.get_for_customer(customer_id)

    @transaction.atomic
    def remove_line(self, customer_id: int, book_id: UUID) -> Cart:
        """Idempotent: removing an absent line is not an error."""
        cart = self._cart_repo.get_for_update(customer_id)
        removed = self._cart_repo.delete_line(cart, book_id)
        logger.info(
            "cart.line_removed",
            customer_id=customer_id,
            book_id=str(book_id),
            removed=removed,
        )
        return self._cart_repo.get_for_customer(customer_id)

    @transaction.atomic
    def clear(self, customer_id: int) -> Cart:
        cart = self._cart_repo.get_for_update(customer_id)
        removed = self._cart_repo.clear(cart)
        logger.info("cart.cleared", customer_id=customer_id, removed=removed)
        return self._cart_repo.get_for_customer(customer_id)

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @transaction.atomic
    def checkout(self, customer_id: int, dto: CheckoutDTO) -> Order:
        """Turn the cart into a pending order and empty the cart.

        The cart row stays locked until commit, so concurrent checkouts of
        one cart produce one order and one ``EmptyCart``.  Stock is only
        checked here, never reserved.

        Raises:
            EmptyCart: the cart has no lines.
            BookNotFound: a book in the cart vanished or was taken off sale.
            InsufficientStock: one or more lines exceed current stock; every
                short line is reported, sold-out books included.
            IdempotencyKeyConflict: the key belongs to another customer.
        """
        log = logger.bind(customer_id=customer_id, idempotency_key=dto.idempotency_key)
        cart = self._cart_repo.get_for_update(customer_id)

        if dto.idempotency_key:
            existing = self._order_service.get_by_idempotency_key(dto.idempotency_key)
            if existing is not None:
                if existing.customer_id != customer_id:
                    raise IdempotencyKeyConflict(
                        "Idempotency key already used for another customer."
                    )
                log.info("cart.checkout_replayed", order_id=str(existing.id))
                return existing

        lines: List[CartLine] = sorted(cart.lines.all(), key=lambda line: str(line.book_id))
        if not lines:
            log.info("cart.checkout_empty")
            raise EmptyCart("Cart is empty.")

        books: Dict[UUID, Book] = self._book_repo.get_many(line.book_id for line in lines)
        shortfalls: List[StockShortfall] = []
        drafts: List[OrderLineDraft] = []
        for line in lines:
            book = books.get(line.book_id)
            if book is None or book.manually_deactivated:
                raise BookNotFound(f"Book '{line.book.title}' is no longer available.")
            if book.stock < line.quantity:
                shortfalls.append(
                    StockShortfall(
                        book_id=book.id,
                        title=book.title,
                        requested=line.quantity,
                        available=book.stock,
                    )
                )
                continue
            drafts.append(
                OrderLineDraft(
                    book_id=book.id, quantity=line.quantity, unit_price=book.price
                )
            )
        if shortfalls:
            log.info("cart.checkout_insufficient_stock", short_books=len(shortfalls))
            raise InsufficientStock(shortfalls)

        order = self._order_service.place_order(
            PlaceOrderDTO(
                customer_id=customer_id,
                lines=drafts,
                shipping_address=dto.shipping_address,
                notes=dto.notes,
                idempotency_key=dto.idempotency_key,
            )
        )
        self._cart_repo.clear(cart)

        log.info(
            "cart.checkout_completed",
            order_id=str(order.id),
            total_amount=str(order.total_amount),
        )
        return order

    def _orderable_book(self, book_id: UUID) -> Book:
        # Sold-out books pass; the stock check reports them.
        book = self._book_repo.get_by_id(str(book_id))
        if book is None or book.manually_deactivated:
            raise BookNotFound(f"Book {book_id} not found.")
        return book


def _ensure_in_stock(book: Book, quantity: int) -> None:
    if quantity > book.stock:
        raise InsufficientStock(
            [
                StockShortfall(
                    book_id=book.id,
                    title=book.title,
                    requested=quantity,
                    available=book.stock,
                )
            ]
        )
