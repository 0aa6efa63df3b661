"""Book repository interface.

Extends ``IRepository[Book]`` with the locking and conditional-update
primitives the checkout and approval paths rely on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Book


class IBookRepository(IRepository["Book"]):
    """Repository contract for the Book aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Book]":
        """List live books with optional filters."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional["Book"]:
        """Retrieve a live book with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_many_for_update(self, ids: Iterable[UUID]) -> Dict[UUID, "Book"]:
        """Lock the live books among ``ids`` in ascending id order.

        Ids that do not resolve are simply absent from the result.
        """

    @abstractmethod
    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, "Book"]:
        """Bulk read of live books by id, without locking."""

    @abstractmethod
    def decrement_stock_if_available(self, id: UUID, quantity: int) -> bool:
        """Atomically subtract ``quantity`` if at least that much is in stock.

        Returns ``False`` and changes nothing otherwise.
        """

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete a book."""
