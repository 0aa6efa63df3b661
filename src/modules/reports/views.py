"""Reporting API views (staff only)."""

from __future__ import annotations

from django.conf import settings
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.orders.constants import PaymentStatus
from modules.reports.dtos import SalesSummaryQuery
from modules.reports.serializers import (
    RevenueParamsSerializer,
    SalesSummaryParamsSerializer,
)
from modules.reports.services import ReportService


class SalesSummaryView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        """GET /api/v1/reports/sales-summary/

        Query params: ``start``, ``end`` (YYYY-MM-DD, inclusive),
        ``payment_status`` (repeatable, default ``paid``), ``top_n``.
        """
        params = SalesSummaryParamsSerializer(
            data={
                **request.query_params.dict(),
                "payment_status": request.query_params.getlist("payment_status"),
            }
        )
        params.is_valid(raise_exception=True)
        data = params.validated_data

        query = SalesSummaryQuery(
            start=data.get("start"),
            end=data.get("end"),
            payment_statuses=frozenset(data.get("payment_status") or {PaymentStatus.PAID.value}),
            top_n=data.get("top_n", settings.REPORT_TOP_N),
        )
        summary = ReportService().sales_summary(query)
        return Response(summary.model_dump(mode="json"))


class RevenueView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        """GET /api/v1/reports/revenue/?days=N"""
        params = RevenueParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        series = ReportService().revenue_by_day(params.validated_data.get("days"))
        return Response([point.model_dump(mode="json") for point in series])
