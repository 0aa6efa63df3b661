"""Binding stock commit for order approval.

``StockReservation.commit`` runs inside the approval transaction, after
the order row has been locked and found pending.  It either decrements
stock for every line of the order or raises without leaving any
decrement behind (the enclosing ``transaction.atomic`` rolls back).

Books are locked in ascending id order so two approvals touching the
same books always acquire locks in the same order.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING, Dict, Iterable, List
from uuid import UUID

import structlog

from modules.catalog.exceptions import InsufficientStock, StockShortfall

if TYPE_CHECKING:
    from modules.catalog.models import Book
    from modules.catalog.repositories.interfaces import IBookRepository
    from modules.orders.models import Order, OrderLine

logger = structlog.get_logger(__name__)

UNKNOWN_BOOK_TITLE = "Unknown book"


def requested_quantities(lines: Iterable[OrderLine]) -> Dict[UUID, int]:
    """Total quantity per book, keyed in ascending book id order."""
    totals: Dict[UUID, int] = {}
    for line in lines:
        totals[line.book_id] = totals.get(line.book_id, 0) + line.quantity
    return OrderedDict(sorted(totals.items(), key=lambda item: str(item[0])))


def find_shortfalls(
    requested: Dict[UUID, int], books: Dict[UUID, Book]
) -> List[StockShortfall]:
    """Every book whose current stock cannot cover the request.

    A book that no longer resolves counts as zero stock.
    """
    shortfalls = []
    for book_id, quantity in requested.items():
        book = books.get(book_id)
        available = book.stock if book is not None else 0
        if available < quantity:
            shortfalls.append(
                StockShortfall(
                    book_id=book_id,
                    title=book.title if book is not None else UNKNOWN_BOOK_TITLE,
                    requested=quantity,
                    available=available,
                )
            )
    return shortfalls


class StockReservation:
    """Commits an order's stock against the catalog."""

    def __init__(self, book_repository: IBookRepository) -> None:
        self._book_repo = book_repository

    def commit(self, order: Order) -> Dict[UUID, int]:
        """Decrement stock for every line of ``order``.

        Must be called inside ``transaction.atomic`` with the order locked.

        Raises:
            InsufficientStock: at least one line cannot be covered; every
                short line is listed and no stock has been changed.
        """
        log = logger.bind(order_id=str(order.id))
        requested = requested_quantities(order.lines.all())
        books = self._book_repo.get_many_for_update(requested.keys())

        shortfalls = find_shortfalls(requested, books)
        if shortfalls:
            log.info(
                "stock.reservation_rejected",
                short_books=[str(s.book_id) for s in shortfalls],
            )
            raise InsufficientStock(shortfalls)

        for book_id, quantity in requested.items():
            if not self._book_repo.decrement_stock_if_available(book_id, quantity):
                # Only reachable if a writer bypassed the row locks.
                current = self._book_repo.get_by_id(str(book_id))
                raise InsufficientStock(
                    [
                        StockShortfall(
                            book_id=book_id,
                            title=books[book_id].title,
                            requested=quantity,
                            available=current.stock if current is not None else 0,
                        )
                    ]
                )

        log.info("stock.reservation_committed", books=len(requested))
        return dict(requested)
