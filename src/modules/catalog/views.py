"""Book API views.

Browsing is open to any authenticated user; customers only see books on
sale.  Every write is restricted to staff.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.catalog.dtos import CreateBookDTO, UpdateBookDTO
from modules.catalog.exceptions import BookNotFound
from modules.catalog.filters import BookFilter
from modules.catalog.models import Book
from modules.catalog.repositories.django_repository import BookDjangoRepository
from modules.catalog.serializers import (
    BookSerializer,
    CreateBookSerializer,
    RestockSerializer,
    SetActiveSerializer,
    UpdateBookSerializer,
)
from modules.catalog.services import BookService
from modules.core.exception_handler import domain_error_response
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

STAFF_ACTIONS = {
    "create",
    "partial_update",
    "destroy",
    "set_active",
    "restock",
}


class BookViewSet(ListModelMixin, GenericViewSet):
    """Catalog endpoints backed by ``BookService``."""

    filterset_class = BookFilter
    search_fields = ["title", "author", "description"]
    ordering_fields = ["title", "author", "price", "stock", "created_at"]
    ordering = ["title", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Book.objects.alive()
    serializer_class = BookSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        book_repository = BookDjangoRepository()
        self._service = BookService(
            repository=book_repository,
            cart_repository=CartDjangoRepository(),
            order_service=OrderService(
                order_repository=OrderDjangoRepository(),
                book_repository=book_repository,
            ),
        )

    def get_permissions(self):
        if self.action in STAFF_ACTIONS:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_queryset(self):
        if self.request.user.is_staff:
            return self._service.list_books()
        return self._service.list_books({"is_active": True})

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/books/{pk}/"""
        try:
            book = self._service.get_book(pk)
        except BookNotFound as exc:
            return domain_error_response(exc)
        if not book.is_active and not request.user.is_staff:
            return domain_error_response(BookNotFound(f"Book {pk} not found."))
        return Response(BookSerializer(book).data)

    # ------------------------------------------------------------------
    # Staff maintenance
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/books/"""
        serializer = CreateBookSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        book = self._service.create_book(CreateBookDTO(**serializer.validated_data))
        return Response(BookSerializer(book).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/books/{pk}/"""
        serializer = UpdateBookSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            book = self._service.update_book(
                pk, UpdateBookDTO(**serializer.validated_data)
            )
        except BookNotFound as exc:
            return domain_error_response(exc)
        return Response(BookSerializer(book).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/books/{pk}/"""
        try:
            self._service.delete_book(pk, actor=request.user)
        except BookNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"], url_path="active")
    def set_active(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/books/{pk}/active/"""
        serializer = SetActiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            book = self._service.set_active(pk, serializer.validated_data["is_active"])
        except BookNotFound as exc:
            return domain_error_response(exc)
        return Response(BookSerializer(book).data)

    @action(detail=True, methods=["post"])
    def restock(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/books/{pk}/restock/"""
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            book = self._service.restock(pk, serializer.validated_data["quantity"])
        except BookNotFound as exc:
            return domain_error_response(exc)
        return Response(BookSerializer(book).data)
