"""Order domain exceptions.

``InsufficientStock`` lives in the catalog module; it is re-exported here
because approval raises it too.
"""

from __future__ import annotations

from modules.catalog.exceptions import InsufficientStock, StockShortfall
from modules.core.exceptions import DomainError, NotFound

__all__ = [
    "InsufficientStock",
    "InvalidOrderTransition",
    "OrderNotFound",
    "StockShortfall",
]


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidOrderTransition(DomainError):
    """The order is not pending; approve/reject are no longer possible."""

    code = "invalid_transition"
