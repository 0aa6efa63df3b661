"""Unit tests for domain events: entity buffers and outbox round trips."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.catalog.events import BookStockDepleted
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderPlaced, OrderRejected
from modules.orders.models import Order
from shared.domain.events import DomainEvent, UnknownEventType, event_from_outbox

pytestmark = pytest.mark.unit


def test_order_registers_and_clears_domain_events():
    order = Order(
        customer_id=1,
        order_number="ORD-TEST-000001",
        status=OrderStatus.PENDING,
        total_amount=Decimal("0.00"),
    )

    assert order.domain_events == []

    event = OrderPlaced(aggregate_id=order.id, customer_id=1)
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderPlaced"

    order.clear_domain_events()
    assert order.domain_events == []


def test_subclasses_are_registered():
    for cls in (OrderPlaced, OrderRejected, BookStockDepleted):
        assert DomainEvent.registry[cls.__name__] is cls


def test_event_from_outbox_rebuilds_event():
    aggregate_id = uuid4()
    event = event_from_outbox(
        "OrderRejected",
        {"aggregate_id": str(aggregate_id), "reason": "dup", "event_name": "OrderRejected"},
    )
    assert isinstance(event, OrderRejected)
    assert event.aggregate_id == aggregate_id
    assert event.reason == "dup"


def test_event_from_outbox_unknown_type():
    with pytest.raises(UnknownEventType):
        event_from_outbox("NoSuchEvent", {"aggregate_id": str(uuid4())})
