"""Domain events for the Catalog bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class BookStockDepleted(DomainEvent):
    """Raised when an approval drives a book's stock to zero."""

    title: str = ""
