"""Django ORM implementation of the Order repository.

Concurrency control on status updates combines ``select_for_update()``
with a conditional ``UPDATE ... WHERE status = 'pending'`` so a decision
can never be applied twice, even on databases without row locks.
"""

from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from modules.core.repositories.outbox import record_domain_events
from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderDTO
from modules.orders.models import Order, OrderLine, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

EAGER_RELATIONS = ("lines", "status_history")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, dto: PlaceOrderDTO) -> Order:
        order = Order(
            customer_id=dto.customer_id,
            shipping_address=dto.shipping_address,
            notes=dto.notes,
            idempotency_key=dto.idempotency_key,
            total_amount=dto.total_amount,
        )
        order.save()
        OrderLine.objects.bulk_create(
            [
                OrderLine(
                    order=order,
                    book_id=line.book_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in dto.lines
            ]
        )
        logger.info("order.created", order_id=str(order.id), line_count=len(dto.lines))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return (
                Order.objects.select_related("customer")
                .prefetch_related(*EAGER_RELATIONS)
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[dict] = None) -> models.QuerySet[Order]:
        queryset = Order.objects.select_related("customer").prefetch_related(
            *EAGER_RELATIONS
        )
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("lines")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return (
            Order.objects.select_related("customer")
            .prefetch_related(*EAGER_RELATIONS)
            .filter(idempotency_key=key)
            .first()
        )

    def pending_with_book_for_update(self, book_id: UUID) -> List[Order]:
        return list(
            Order.objects.select_for_update()
            .filter(status=OrderStatus.PENDING, lines__book_id=book_id)
            .distinct()
            .order_by("id")
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        self.record_events(entity)
        return entity

    def record_events(self, order: Order) -> None:
        rows = record_domain_events(order, topic="orders")
        if rows:
            logger.debug("order.events_recorded", order_id=str(order.id), count=len(rows))

    def transition(
        self,
        order: Order,
        new_status: str,
        payment_status: Optional[str] = None,
    ) -> bool:
        now = timezone.now()
        changes = {"status": new_status, "decided_at": now, "updated_at": now}
        if payment_status is not None:
            changes["payment_status"] = payment_status
        updated = Order.objects.filter(
            id=order.id, status=OrderStatus.PENDING
        ).update(**changes)
        if not updated:
            return False
        for field, value in changes.items():
            setattr(order, field, value)
        return True

    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        actor: Any = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
            user=actor if getattr(actor, "pk", None) else None,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    def remove_book_lines(self, order: Order, book_id: UUID) -> int:
        removed, _ = OrderLine.objects.filter(order=order, book_id=book_id).delete()
        return removed
