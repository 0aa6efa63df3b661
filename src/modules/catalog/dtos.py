"""Book DTOs for the Service Layer.

Immutable pydantic v2 contracts between the API layer and
``BookService``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CreateBookDTO(BaseModel):
    """Immutable DTO for book creation requests."""

    model_config = ConfigDict(frozen=True)

    title: str
    author: str
    price: Decimal
    category: str = ""
    description: str = ""
    publish_year: Optional[int] = None
    stock: int = 0

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Must not be blank.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock cannot be negative.")
        return v


class UpdateBookDTO(BaseModel):
    """Partial update; only supplied fields are written."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    publish_year: Optional[int] = None
    price: Optional[Decimal] = None
    stock: Optional[int] = None

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Stock cannot be negative.")
        return v
