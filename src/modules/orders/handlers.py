"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderApproved, OrderPlaced, OrderRejected
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPlacedHandler(IEventHandler[OrderPlaced]):
    def handle(self, event: OrderPlaced) -> None:
        logger.info(
            "order.event.placed",
            order_id=str(event.aggregate_id),
            customer_id=event.customer_id,
            total_amount=event.total_amount,
            line_count=event.line_count,
        )


class OrderApprovedHandler(IEventHandler[OrderApproved]):
    def handle(self, event: OrderApproved) -> None:
        logger.info(
            "order.event.approved",
            order_id=str(event.aggregate_id),
            total_amount=event.total_amount,
        )


class OrderRejectedHandler(IEventHandler[OrderRejected]):
    def handle(self, event: OrderRejected) -> None:
        logger.info(
            "order.event.rejected",
            order_id=str(event.aggregate_id),
            reason=event.reason,
        )


order_placed_handler = OrderPlacedHandler()
order_approved_handler = OrderApprovedHandler()
order_rejected_handler = OrderRejectedHandler()
