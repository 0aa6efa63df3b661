"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when checkout creates a pending order."""

    customer_id: int = 0
    total_amount: str = "0.00"
    line_count: int = 0


@dataclass(frozen=True)
class OrderApproved(DomainEvent):
    """Raised when an order is approved and its stock committed."""

    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderRejected(DomainEvent):
    """Raised when an order is rejected."""

    reason: str = ""
