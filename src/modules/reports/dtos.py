"""Reporting DTOs.

Output contracts of ``ReportService``; nothing here is ever written back.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import FrozenSet, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import PaymentStatus


class SalesSummaryQuery(BaseModel):
    """Filters for ``sales_summary``; dates are inclusive."""

    model_config = ConfigDict(frozen=True)

    start: Optional[date] = None
    end: Optional[date] = None
    payment_statuses: FrozenSet[str] = frozenset({PaymentStatus.PAID.value})
    top_n: int = 10

    @field_validator("payment_statuses")
    @classmethod
    def known_statuses(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        allowed = set(PaymentStatus.values)
        unknown = set(v) - allowed
        if unknown:
            raise ValueError(f"Unknown payment status: {', '.join(sorted(unknown))}.")
        if not v:
            raise ValueError("At least one payment status is required.")
        return v

    @field_validator("top_n")
    @classmethod
    def top_n_in_range(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("top_n must be between 1 and 100.")
        return v

    @model_validator(mode="after")
    def window_is_ordered(self):
        if self.start and self.end and self.start > self.end:
            raise ValueError("start must not be after end.")
        return self


class TopBookDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    book_id: UUID
    title: str
    quantity: int
    revenue: Decimal


class SalesSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Optional[date]
    end: Optional[date]
    payment_statuses: List[str]
    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
    top_books: List[TopBookDTO]


class DailyRevenueDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: date
    order_count: int
    revenue: Decimal
