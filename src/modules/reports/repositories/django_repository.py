"""Read-only aggregate queries over orders for the reporting view."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.db.models import Count, DecimalField, F, Q, QuerySet, Sum
from django.db.models.functions import Coalesce, TruncDate

from modules.catalog.models import Book
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderLine

ZERO = Decimal("0.00")
MONEY = DecimalField(max_digits=14, decimal_places=2)


class ReportDjangoRepository:
    """Aggregations computed in the database; no row is ever locked."""

    def orders_in_window(
        self,
        start: Optional[date],
        end: Optional[date],
        payment_statuses: Iterable[str],
    ) -> QuerySet[Order]:
        queryset = Order.objects.filter(payment_status__in=list(payment_statuses))
        if start is not None:
            queryset = queryset.filter(created_at__date__gte=start)
        if end is not None:
            queryset = queryset.filter(created_at__date__lte=end)
        return queryset

    def totals(self, orders: QuerySet[Order]) -> Dict[str, object]:
        return orders.aggregate(
            total_orders=Count("id"),
            total_revenue=Coalesce(
                Sum("total_amount", filter=Q(payment_status=PaymentStatus.PAID)),
                ZERO,
                output_field=MONEY,
            ),
        )

    def top_books(self, orders: QuerySet[Order], limit: int) -> List[Dict[str, object]]:
        return list(
            OrderLine.objects.filter(
                order__in=orders.filter(status=OrderStatus.DELIVERED)
            )
            .values("book_id")
            .annotate(
                quantity_sold=Sum("quantity"),
                revenue=Sum(F("unit_price") * F("quantity"), output_field=MONEY),
            )
            .order_by("-quantity_sold", "-revenue", "book_id")[:limit]
        )

    def book_titles(self, ids: Iterable[UUID]) -> Dict[UUID, str]:
        return dict(Book.objects.alive().filter(id__in=list(ids)).values_list("id", "title"))

    def paid_revenue_by_day(self, start: date, end: date) -> List[Dict[str, object]]:
        return list(
            Order.objects.filter(
                payment_status=PaymentStatus.PAID,
                created_at__date__gte=start,
                created_at__date__lte=end,
            )
            .annotate(day=TruncDate("created_at"))
            .values("day")
            .annotate(order_count=Count("id"), revenue=Sum("total_amount"))
            .order_by("day")
        )
