"""Book service layer (Use Cases).

Owns every write to ``Book``: creation, edits, restocking, activation
and deletion.  Stock is decremented only through
``decrement_stock_if_available``, which the reservation engine calls
during approval.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.db import models, transaction

from modules.catalog.exceptions import BookNotFound
from modules.catalog.models import Book

if TYPE_CHECKING:
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.catalog.dtos import CreateBookDTO, UpdateBookDTO
    from modules.catalog.repositories.interfaces import IBookRepository
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "author",
    "category",
    "description",
    "publish_year",
    "price",
)


class BookService:
    """Application service for Book use-cases.

    ``cart_repository`` and ``order_service`` are only needed by
    ``delete_book``, which has to clean up references to the book.
    """

    def __init__(
        self,
        repository: IBookRepository,
        cart_repository: Optional[ICartRepository] = None,
        order_service: Optional[OrderService] = None,
    ) -> None:
        self._repo = repository
        self._cart_repo = cart_repository
        self._order_service = order_service

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_book(self, id: str) -> Book:
        """Raises ``BookNotFound`` for missing or deleted books."""
        book = self._repo.get_by_id(id)
        if not book:
            raise BookNotFound(f"Book {id} not found.")
        return book

    def list_books(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Book]:
        return self._repo.list(filters)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_book(self, dto: CreateBookDTO) -> Book:
        book = Book(
            title=dto.title,
            author=dto.author,
            category=dto.category,
            description=dto.description,
            publish_year=dto.publish_year,
            price=dto.price,
            stock=dto.stock,
        )
        book.refresh_active()
        book = self._repo.save(book)
        logger.info("book.created", book_id=str(book.id), stock=book.stock)
        return book

    @transaction.atomic
    def update_book(self, id: str, dto: UpdateBookDTO) -> Book:
        book = self._lock(id)
        for field in UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(book, field, value)
        if dto.stock is not None:
            book.stock = dto.stock
            book.refresh_active()
        book = self._repo.save(book)
        logger.info("book.updated", book_id=str(id), is_active=book.is_active)
        return book

    @transaction.atomic
    def restock(self, id: str, quantity: int) -> Book:
        """Add ``quantity`` copies.  A manual deactivation is kept."""
        if quantity < 1:
            raise ValueError("Restock quantity must be at least 1.")
        book = self._lock(id)
        book.stock += quantity
        book.refresh_active()
        book = self._repo.save(book)
        logger.info(
            "book.restocked",
            book_id=str(id),
            quantity=quantity,
            stock=book.stock,
            is_active=book.is_active,
        )
        return book

    @transaction.atomic
    def set_active(self, id: str, active: bool) -> Book:
        """Pin a book off sale, or clear the pin.

        Clearing the pin puts the book back on sale only if it has stock.
        """
        book = self._lock(id)
        book.manually_deactivated = not active
        book.refresh_active()
        book = self._repo.save(book)
        logger.info(
            "book.activation_changed",
            book_id=str(id),
            requested=active,
            is_active=book.is_active,
        )
        return book

    def decrement_stock_if_available(self, id: UUID, quantity: int) -> bool:
        return self._repo.decrement_stock_if_available(id, quantity)

    @transaction.atomic
    def delete_book(self, id: str, actor: Any = None) -> None:
        """Soft-delete a book and drop it from carts and pending orders."""
        book = self._lock(id)
        self._repo.delete(str(book.id))

        removed_lines = 0
        if self._cart_repo is not None:
            removed_lines = self._cart_repo.remove_book_everywhere(book.id)
        touched_orders = []
        if self._order_service is not None:
            touched_orders = self._order_service.remove_book_from_pending_orders(
                book.id, actor=actor
            )

        logger.info(
            "book.deleted",
            book_id=str(book.id),
            cart_lines_removed=removed_lines,
            pending_orders_touched=len(touched_orders),
        )

    def _lock(self, id: str) -> Book:
        book = self._repo.get_for_update(id)
        if not book:
            raise BookNotFound(f"Book {id} not found.")
        return book
