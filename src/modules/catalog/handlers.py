"""Event handlers for Catalog domain events."""

from __future__ import annotations

import structlog

from modules.catalog.events import BookStockDepleted
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class BookStockDepletedHandler(IEventHandler[BookStockDepleted]):
    def handle(self, event: BookStockDepleted) -> None:
        logger.warning(
            "book.stock_depleted",
            book_id=str(event.aggregate_id),
            title=event.title,
        )


book_stock_depleted_handler = BookStockDepletedHandler()
