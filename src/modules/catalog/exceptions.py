"""Catalog domain exceptions.

Raised by the Service Layer and by the reservation engine.  The API layer
catches these and translates them with ``domain_error_response``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List
from uuid import UUID

from modules.core.exceptions import DomainError, NotFound


class BookNotFound(NotFound):
    """The requested book does not exist, was deleted or is not on sale."""


@dataclass(frozen=True)
class StockShortfall:
    """One line that cannot be satisfied from current stock."""

    book_id: UUID
    title: str
    requested: int
    available: int

    def describe(self) -> str:
        return (
            f"'{self.title}': requested {self.requested}, "
            f"available {self.available}"
        )


class InsufficientStock(DomainError):
    """Current stock cannot satisfy every requested quantity."""

    code = "insufficient_stock"

    def __init__(self, shortfalls: Iterable[StockShortfall]) -> None:
        self.shortfalls: List[StockShortfall] = list(shortfalls)
        details = "; ".join(s.describe() for s in self.shortfalls)
        super().__init__(f"Insufficient stock for {details}.")

    @property
    def book_ids(self) -> List[UUID]:
        return [s.book_id for s in self.shortfalls]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["shortfalls"] = [
            {**asdict(s), "book_id": str(s.book_id)} for s in self.shortfalls
        ]
        return data
