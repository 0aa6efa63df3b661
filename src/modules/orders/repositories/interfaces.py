"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the order lifecycle
needs: atomic creation with lines, row locking, the compare-and-swap
status flip, history tracking and idempotency-key look-up.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import PlaceOrderDTO
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderLine children and
    OrderStatusHistory records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, dto: "PlaceOrderDTO") -> "Order":
        """Create a pending order with its lines and computed total."""

    @abstractmethod
    def list(self, filters: Optional[dict] = None) -> "models.QuerySet[Order]":
        """List orders with eager-loaded lines and history."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional["Order"]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def transition(
        self,
        order: "Order",
        new_status: str,
        payment_status: Optional[str] = None,
    ) -> bool:
        """Move ``order`` out of pending with a compare-and-swap update.

        Returns ``False`` when the row was no longer pending.
        """

    @abstractmethod
    def record_events(self, order: "Order") -> None:
        """Write the order's pending domain events to the outbox."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        actor: Any = None,
    ) -> "OrderStatusHistory":
        """Append a status change to the audit trail."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional["Order"]:
        """Retrieve an order by its idempotency key."""

    @abstractmethod
    def pending_with_book_for_update(self, book_id: UUID) -> List["Order"]:
        """Lock every pending order that has a line for ``book_id``."""

    @abstractmethod
    def remove_book_lines(self, order: "Order", book_id: UUID) -> int:
        """Delete the lines of ``order`` for ``book_id``; the total is left as captured."""
