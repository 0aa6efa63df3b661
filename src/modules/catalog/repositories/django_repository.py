"""Django ORM implementation of the Book repository."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.catalog.events import BookStockDepleted
from modules.catalog.models import Book
from modules.catalog.repositories.interfaces import IBookRepository
from modules.core.repositories.outbox import record_domain_events

logger = structlog.get_logger(__name__)


class BookDjangoRepository(IBookRepository):
    """Concrete Book repository backed by Django ORM.

    Only live (not soft-deleted) books are visible through this class.
    """

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Book]:
        """Returns ``None`` for non-existent, deleted or malformed IDs."""
        try:
            return Book.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Book]:
        queryset = Book.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_for_update(self, id: str) -> Optional[Book]:
        try:
            return Book.objects.select_for_update().alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_many_for_update(self, ids: Iterable[UUID]) -> Dict[UUID, Book]:
        wanted = sorted(set(ids), key=str)
        books = (
            Book.objects.select_for_update()
            .alive()
            .filter(id__in=wanted)
            .order_by("id")
        )
        return {book.id: book for book in books}

    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, Book]:
        return {book.id: book for book in Book.objects.alive().filter(id__in=set(ids))}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Book) -> Book:
        entity.save()
        record_domain_events(entity, topic="catalog")
        return entity

    @transaction.atomic
    def decrement_stock_if_available(self, id: UUID, quantity: int) -> bool:
        """Conditional ``UPDATE ... SET stock = stock - n WHERE stock >= n``.

        When the decrement empties the shelf the book is taken off sale and
        a ``BookStockDepleted`` event is written to the outbox.  Reaching
        zero only ever sets ``is_active`` to ``False``; a manual pin is
        never overridden.
        """
        updated = (
            Book.objects.alive()
            .filter(id=id, stock__gte=quantity)
            .update(stock=F("stock") - quantity, updated_at=timezone.now())
        )
        if not updated:
            logger.warning("stock.decrement_rejected", book_id=str(id), quantity=quantity)
            return False

        book = Book.objects.get(id=id)
        logger.info(
            "stock.decremented",
            book_id=str(id),
            quantity=quantity,
            remaining=book.stock,
        )
        if book.stock == 0:
            book.is_active = False
            book.add_domain_event(BookStockDepleted(aggregate_id=book.id, title=book.title))
            self.save(book)
        return True

    @transaction.atomic
    def delete(self, id: str) -> bool:
        book = self.get_by_id(id)
        if not book:
            return False
        book.delete()
        logger.info("book.soft_deleted", book_id=str(id))
        return True
