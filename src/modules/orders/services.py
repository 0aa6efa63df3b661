"""Order service layer (Use Cases).

Owns the order lifecycle.  ``approve_order`` and ``reject_order`` are the
only writers of ``status`` and ``payment_status``; ``place_order`` is
called by cart checkout.

Business rules enforced:
- Status moves only pending -> delivered or pending -> rejected, once.
- Approval commits stock for every line or for none of them.
- A storage failure during a decision leaves the order pending and stock
  untouched, and surfaces as ``StorageFailure``.
- History is recorded on every status change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import DatabaseError, models, transaction

from modules.core.exceptions import StorageFailure
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.events import OrderApproved, OrderPlaced, OrderRejected
from modules.orders.exceptions import InvalidOrderTransition, OrderNotFound
from modules.orders.reservation import StockReservation

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IBookRepository
    from modules.orders.dtos import PlaceOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

EMPTIED_BY_CATALOG_NOTE = "All books in this order were removed from the catalog."


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        book_repository: IBookRepository,
        reservation: Optional[StockReservation] = None,
    ) -> None:
        self._order_repo = order_repository
        self._reservation = reservation or StockReservation(book_repository)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @transaction.atomic
    def place_order(self, dto: PlaceOrderDTO, actor: Any = None) -> Order:
        """Persist a pending order.  Stock is not touched."""
        order = self._order_repo.create(dto)
        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                customer_id=dto.customer_id,
                total_amount=str(order.total_amount),
                line_count=len(dto.lines),
            )
        )
        self._order_repo.record_events(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.PENDING,
            notes="Order placed",
            actor=actor,
        )
        logger.info(
            "order.placed",
            order_id=str(order.id),
            customer_id=dto.customer_id,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def approve_order(self, order_id: UUID | str, actor: Any = None, notes: str = "") -> Order:
        """Approve a pending order and commit its stock.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderTransition: order is not pending (including a lost
                race against another decision).
            InsufficientStock: current stock cannot cover every line; the
                order stays pending.
            StorageFailure: the database failed; nothing was changed.
        """
        try:
            self._approve(order_id, actor, notes)
        except DatabaseError as exc:
            logger.error("order.approve_storage_failure", order_id=str(order_id), error=str(exc))
            raise StorageFailure(
                f"Could not approve order {order_id}; no changes were made."
            ) from exc
        return self.get_order(str(order_id))

    def reject_order(self, order_id: UUID | str, actor: Any = None, notes: str = "") -> Order:
        """Reject a pending order.  Stock and payment status are untouched.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderTransition: order is not pending.
            StorageFailure: the database failed; nothing was changed.
        """
        try:
            self._reject(order_id, actor, notes)
        except DatabaseError as exc:
            logger.error("order.reject_storage_failure", order_id=str(order_id), error=str(exc))
            raise StorageFailure(
                f"Could not reject order {order_id}; no changes were made."
            ) from exc
        return self.get_order(str(order_id))

    @transaction.atomic
    def _approve(self, order_id: UUID | str, actor: Any, notes: str) -> Order:
        order = self._lock_pending(order_id, OrderStatus.DELIVERED)
        log = logger.bind(order_id=str(order.id), order_number=order.order_number)

        self._reservation.commit(order)

        if not self._order_repo.transition(
            order, OrderStatus.DELIVERED, payment_status=PaymentStatus.PAID
        ):
            log.warning("order.approve_lost_race")
            raise InvalidOrderTransition(
                f"Order {order.order_number} was decided concurrently."
            )

        order.add_domain_event(
            OrderApproved(aggregate_id=order.id, total_amount=str(order.total_amount))
        )
        self._order_repo.record_events(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.DELIVERED,
            notes=notes or "Order approved",
            old_status=OrderStatus.PENDING,
            actor=actor,
        )
        log.info("order.approved", total_amount=str(order.total_amount))
        return order

    @transaction.atomic
    def _reject(self, order_id: UUID | str, actor: Any, notes: str) -> Order:
        order = self._lock_pending(order_id, OrderStatus.REJECTED)
        return self._reject_locked(order, actor, notes or "Order rejected")

    def _reject_locked(self, order: Order, actor: Any, notes: str) -> Order:
        if not self._order_repo.transition(order, OrderStatus.REJECTED):
            logger.warning("order.reject_lost_race", order_id=str(order.id))
            raise InvalidOrderTransition(
                f"Order {order.order_number} was decided concurrently."
            )
        order.add_domain_event(OrderRejected(aggregate_id=order.id, reason=notes))
        self._order_repo.record_events(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.REJECTED,
            notes=notes,
            old_status=OrderStatus.PENDING,
            actor=actor,
        )
        logger.info("order.rejected", order_id=str(order.id), reason=notes)
        return order

    def _lock_pending(self, order_id: UUID | str, target: str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not order.can_transition_to(target):
            logger.warning(
                "order.invalid_transition",
                order_id=str(order.id),
                current_status=order.status,
                new_status=target,
            )
            raise InvalidOrderTransition(
                f"Cannot move order {order.order_number} from {order.status} to {target}."
            )
        return order

    # ------------------------------------------------------------------
    # Catalog maintenance
    # ------------------------------------------------------------------

    @transaction.atomic
    def remove_book_from_pending_orders(self, book_id: UUID, actor: Any = None) -> List[Order]:
        """Drop a deleted book from every pending order.

        ``total_amount`` keeps the value captured at checkout; an order left
        without lines is rejected.  Decided orders are never touched.
        """
        touched = []
        for order in self._order_repo.pending_with_book_for_update(book_id):
            self._order_repo.remove_book_lines(order, book_id)
            if not order.lines.exists():
                self._reject_locked(order, actor, EMPTIED_BY_CATALOG_NOTE)
            logger.info(
                "order.book_removed",
                order_id=str(order.id),
                book_id=str(book_id),
                total_amount=str(order.total_amount),
                status=order.status,
            )
            touched.append(order)
        return touched

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Raises ``OrderNotFound`` if the order does not exist."""
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return self._order_repo.get_by_idempotency_key(key)

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Order]:
        return self._order_repo.list(filters)

    def list_pending_orders(self) -> models.QuerySet[Order]:
        return self._order_repo.list({"status": OrderStatus.PENDING})

    def list_customer_orders(self, customer_id: int) -> models.QuerySet[Order]:
        return self._order_repo.list({"customer_id": customer_id})
