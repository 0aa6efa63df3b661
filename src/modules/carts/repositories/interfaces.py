"""Cart repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartLine


class ICartRepository(IRepository["Cart"]):
    """Repository contract for the Cart aggregate."""

    @abstractmethod
    def get_for_customer(self, customer_id: int) -> "Cart":
        """Return the customer's cart, creating an empty one if needed."""

    @abstractmethod
    def get_for_update(self, customer_id: int) -> "Cart":
        """Like ``get_for_customer`` but holds a row lock on the cart."""

    @abstractmethod
    def get_line(self, cart: "Cart", book_id: UUID) -> Optional["CartLine"]:
        """Return the line for ``book_id`` or ``None``."""

    @abstractmethod
    def save_line(self, line: "CartLine") -> "CartLine":
        """Persist a line."""

    @abstractmethod
    def delete_line(self, cart: "Cart", book_id: UUID) -> int:
        """Delete the line for ``book_id``; returns the number removed."""

    @abstractmethod
    def clear(self, cart: "Cart") -> int:
        """Delete every line of ``cart``."""

    @abstractmethod
    def remove_book_everywhere(self, book_id: UUID) -> int:
        """Delete every cart line that references ``book_id``."""
