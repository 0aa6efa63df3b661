"""Reporting service.

Read-only views over finalized orders.  Revenue counts only paid orders;
best sellers count only lines of delivered orders.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import structlog
from django.conf import settings
from django.utils import timezone

from modules.orders.reservation import UNKNOWN_BOOK_TITLE
from modules.reports.dtos import (
    DailyRevenueDTO,
    SalesSummaryDTO,
    SalesSummaryQuery,
    TopBookDTO,
)
from modules.reports.repositories.django_repository import ReportDjangoRepository

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


class ReportService:
    def __init__(self, repository: Optional[ReportDjangoRepository] = None) -> None:
        self._repo = repository or ReportDjangoRepository()

    def sales_summary(self, query: Optional[SalesSummaryQuery] = None) -> SalesSummaryDTO:
        """Order count, revenue, average order value and best sellers.

        ``total_orders`` counts every order in the window whose payment
        status is in the filter; ``total_revenue`` sums only the paid ones.
        """
        query = query or SalesSummaryQuery(top_n=settings.REPORT_TOP_N)
        orders = self._repo.orders_in_window(query.start, query.end, query.payment_statuses)

        totals = self._repo.totals(orders)
        total_orders = totals["total_orders"] or 0
        total_revenue = Decimal(totals["total_revenue"] or 0).quantize(CENT)
        average = (
            (total_revenue / total_orders).quantize(CENT, rounding=ROUND_HALF_UP)
            if total_orders
            else Decimal("0.00")
        )

        rows = self._repo.top_books(orders, query.top_n)
        titles = self._repo.book_titles(row["book_id"] for row in rows)
        top_books = [
            TopBookDTO(
                book_id=row["book_id"],
                title=titles.get(row["book_id"], UNKNOWN_BOOK_TITLE),
                quantity=row["quantity_sold"],
                revenue=Decimal(row["revenue"]).quantize(CENT),
            )
            for row in rows
        ]

        logger.info(
            "report.sales_summary",
            total_orders=total_orders,
            total_revenue=str(total_revenue),
        )
        return SalesSummaryDTO(
            start=query.start,
            end=query.end,
            payment_statuses=sorted(query.payment_statuses),
            total_orders=total_orders,
            total_revenue=total_revenue,
            average_order_value=average,
            top_books=top_books,
        )

    def revenue_by_day(
        self, days: Optional[int] = None, today: Optional[date] = None
    ) -> List[DailyRevenueDTO]:
        """Paid revenue for each of the last ``days`` days, oldest first.

        Days without paid orders appear with zero revenue.
        """
        days = days or settings.REPORT_REVENUE_DAYS
        if days < 1:
            raise ValueError("days must be at least 1.")
        today = today or timezone.localdate()
        start = today - timedelta(days=days - 1)

        found = {
            row["day"]: row for row in self._repo.paid_revenue_by_day(start, today)
        }
        series = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            row = found.get(day)
            series.append(
                DailyRevenueDTO(
                    day=day,
                    order_count=row["order_count"] if row else 0,
                    revenue=Decimal(row["revenue"] if row else 0).quantize(CENT),
                )
            )
        return series
