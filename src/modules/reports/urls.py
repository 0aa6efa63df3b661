"""Reporting URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.reports.views import RevenueView, SalesSummaryView

urlpatterns = [
    path("reports/sales-summary/", SalesSummaryView.as_view(), name="report-sales-summary"),
    path("reports/revenue/", RevenueView.as_view(), name="report-revenue"),
]
