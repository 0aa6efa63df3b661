"""Cart DTOs for the Service Layer.

- ``AddCartLineDTO``: add a book to the cart (or bump its quantity).
- ``UpdateCartLineDTO``: set a line's quantity; zero or less removes it.
- ``CheckoutDTO``: turn the cart into a pending order.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.conf import settings
from pydantic import BaseModel, ConfigDict, field_validator


def _check_upper_bound(v: int) -> int:
    if v > settings.MAX_LINE_QUANTITY:
        raise ValueError(f"Quantity cannot exceed {settings.MAX_LINE_QUANTITY}.")
    return v


class AddCartLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    book_id: UUID
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return _check_upper_bound(v)


class UpdateCartLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    book_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        return _check_upper_bound(v)


class CheckoutDTO(BaseModel):
    """Immutable DTO for checkout requests.

    ``idempotency_key`` comes from the ``Idempotency-Key`` header; replaying
    it returns the order created by the first request.
    """

    model_config = ConfigDict(frozen=True)

    shipping_address: str
    notes: str = ""
    idempotency_key: Optional[str] = None

    @field_validator("shipping_address")
    @classmethod
    def address_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Shipping address is required.")
        return v.strip()

    @field_validator("idempotency_key")
    @classmethod
    def key_length(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if len(v) > 255:
            raise ValueError("Idempotency key cannot exceed 255 characters.")
        return v
