"""Unit tests for order event handlers and their bus subscriptions."""

from __future__ import annotations

import uuid
from unittest import mock

import pytest

from modules.orders.events import OrderApproved, OrderPlaced, OrderRejected
from modules.orders.handlers import (
    order_approved_handler,
    order_placed_handler,
    order_rejected_handler,
)
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


@pytest.fixture()
def handler_logger():
    with mock.patch("modules.orders.handlers.logger") as logger:
        yield logger


class TestHandlers:
    def test_placed(self, handler_logger):
        order_id = uuid.uuid4()
        order_placed_handler.handle(
            OrderPlaced(aggregate_id=order_id, customer_id=7, total_amount="25.00", line_count=2)
        )
        handler_logger.info.assert_called_once_with(
            "order.event.placed",
            order_id=str(order_id),
            customer_id=7,
            total_amount="25.00",
            line_count=2,
        )

    def test_approved(self, handler_logger):
        order_id = uuid.uuid4()
        order_approved_handler.handle(OrderApproved(aggregate_id=order_id, total_amount="10.00"))
        handler_logger.info.assert_called_once_with(
            "order.event.approved", order_id=str(order_id), total_amount="10.00"
        )

    def test_rejected(self, handler_logger):
        order_id = uuid.uuid4()
        order_rejected_handler.handle(OrderRejected(aggregate_id=order_id, reason="out of area"))
        handler_logger.info.assert_called_once_with(
            "order.event.rejected", order_id=str(order_id), reason="out of area"
        )


class TestSubscriptions:
    @pytest.mark.parametrize(
        "event_class, handler",
        [
            (OrderPlaced, order_placed_handler),
            (OrderApproved, order_approved_handler),
            (OrderRejected, order_rejected_handler),
        ],
    )
    def test_subscribed_at_startup(self, event_class, handler):
        assert handler in event_bus.handlers_for(event_class)

    def test_publish_reaches_handler(self, handler_logger):
        event_bus.publish(OrderRejected(aggregate_id=uuid.uuid4(), reason="dup"))
        assert handler_logger.info.call_args.args[0] == "order.event.rejected"
