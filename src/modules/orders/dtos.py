"""Order DTOs for the Service Layer.

Immutable pydantic v2 contracts between callers and ``OrderService``.

- ``OrderLineDraft``: one line captured at checkout (price included).
- ``PlaceOrderDTO``: input for creating a pending order.
- ``DecisionDTO``: input for an admin approve/reject decision.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class OrderLineDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    book_id: UUID
    quantity: int
    unit_price: Decimal

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("unit_price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Unit price cannot be negative.")
        return v

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order creation.

    Validates:
    - ``lines`` must contain at least one line.
    - A book appears at most once.
    - ``shipping_address`` is not blank.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: int
    lines: List[OrderLineDraft]
    shipping_address: str
    notes: str = ""
    idempotency_key: Optional[str] = None

    @field_validator("lines")
    @classmethod
    def lines_must_not_be_empty(cls, v: List[OrderLineDraft]) -> List[OrderLineDraft]:
        if not v:
            raise ValueError("Order must have at least one line.")
        return v

    @field_validator("shipping_address")
    @classmethod
    def address_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Shipping address is required.")
        return v.strip()

    @model_validator(mode="after")
    def no_duplicate_books(self):
        book_ids = [line.book_id for line in self.lines]
        if len(book_ids) != len(set(book_ids)):
            raise ValueError("Duplicate book IDs are not allowed in the same order.")
        return self

    @property
    def total_amount(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))


class DecisionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    notes: str = ""

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str) -> str:
        return (v or "").strip()
