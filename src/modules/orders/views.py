"""Order API views.

Customers see their own orders; staff see every order and are the only
ones who can approve or reject.  Domain errors are returned verbatim.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.catalog.exceptions import InsufficientStock
from modules.catalog.repositories.django_repository import BookDjangoRepository
from modules.core.exception_handler import domain_error_response
from modules.core.exceptions import StorageFailure
from modules.orders.dtos import DecisionDTO
from modules.orders.exceptions import InvalidOrderTransition, OrderNotFound
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    DecisionSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from modules.orders.services import OrderService

DECISION_ACTIONS = {"approve", "reject"}


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations backed by ``OrderService``."""

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "shipping_address"]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            book_repository=BookDjangoRepository(),
        )

    def get_permissions(self):
        if self.action in DECISION_ACTIONS or self.action == "pending":
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = "order_decision" if self.action in DECISION_ACTIONS else None
        return super().get_throttles()

    def get_queryset(self):
        user = self.request.user
        if user.is_staff:
            return self._service.list_orders()
        return self._service.list_customer_orders(user.pk)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"])
    def pending(self, request: Request) -> Response:
        """GET /api/v1/orders/pending/ (oldest first, the admin work queue)."""
        queryset = self._service.list_pending_orders().order_by("created_at", "id")
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except OrderNotFound as exc:
            return domain_error_response(exc)
        if not request.user.is_staff and order.customer_id != request.user.pk:
            return domain_error_response(OrderNotFound(f"Order {pk} not found."))
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def approve(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/approve/

        409 with ``shortfalls`` when stock cannot cover the order, 409 when
        the order was already decided.
        """
        dto = self._decision(request)
        try:
            order = self._service.approve_order(pk, actor=request.user, notes=dto.notes)
        except (
            OrderNotFound,
            InvalidOrderTransition,
            InsufficientStock,
            StorageFailure,
        ) as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def reject(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/reject/"""
        dto = self._decision(request)
        try:
            order = self._service.reject_order(pk, actor=request.user, notes=dto.notes)
        except (OrderNotFound, InvalidOrderTransition, StorageFailure) as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @staticmethod
    def _decision(request: Request) -> DecisionDTO:
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return DecisionDTO(**serializer.validated_data)
