"""Cart API views.

Every endpoint works on the authenticated user's own cart.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.carts.dtos import AddCartLineDTO, CheckoutDTO, UpdateCartLineDTO
from modules.carts.exceptions import CartLineNotFound, EmptyCart, IdempotencyKeyConflict
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.serializers import (
    AddCartLineSerializer,
    CartSerializer,
    CheckoutSerializer,
    UpdateCartLineSerializer,
)
from modules.carts.services import CartService
from modules.catalog.exceptions import BookNotFound, InsufficientStock
from modules.catalog.repositories.django_repository import BookDjangoRepository
from modules.core.exception_handler import domain_error_response
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderSerializer
from modules.orders.services import OrderService

IDEMPOTENCY_HEADER = "Idempotency-Key"


def _validation_error(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class CartBaseView(APIView):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        book_repository = BookDjangoRepository()
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            book_repository=book_repository,
            order_service=OrderService(
                order_repository=OrderDjangoRepository(),
                book_repository=book_repository,
            ),
        )

    def _cart_response(self, cart, status_code: int = status.HTTP_200_OK) -> Response:
        return Response(CartSerializer(cart).data, status=status_code)


class CartView(CartBaseView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        return self._cart_response(self._service.get_cart(request.user.pk))

    def delete(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        return self._cart_response(self._service.clear(request.user.pk))


class CartLinesView(CartBaseView):
    def post(self, request: Request) -> Response:
        """POST /api/v1/cart/lines/"""
        serializer = AddCartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = AddCartLineDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return _validation_error(exc)
        try:
            cart = self._service.add_line(request.user.pk, dto)
        except (BookNotFound, InsufficientStock) as exc:
            return domain_error_response(exc)
        return self._cart_response(cart, status.HTTP_201_CREATED)


class CartLineDetailView(CartBaseView):
    def patch(self, request: Request, book_id: UUID) -> Response:
        """PATCH /api/v1/cart/lines/{book_id}/"""
        serializer = UpdateCartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = UpdateCartLineDTO(book_id=book_id, **serializer.validated_data)
        except PydanticValidationError as exc:
            return _validation_error(exc)
        try:
            cart = self._service.update_line(request.user.pk, dto)
        except (CartLineNotFound, BookNotFound, InsufficientStock) as exc:
            return domain_error_response(exc)
        return self._cart_response(cart)

    def delete(self, request: Request, book_id: UUID) -> Response:
        """DELETE /api/v1/cart/lines/{book_id}/"""
        return self._cart_response(self._service.remove_line(request.user.pk, book_id))


class CheckoutView(CartBaseView):
    throttle_scope = "checkout"

    def post(self, request: Request) -> Response:
        """POST /api/v1/cart/checkout/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 200 if the key was already used, 201 for new orders.
        """
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CheckoutDTO(
                idempotency_key=request.headers.get(IDEMPOTENCY_HEADER),
                **serializer.validated_data,
            )
        except PydanticValidationError as exc:
            return _validation_error(exc)

        replayed = bool(dto.idempotency_key) and (
            OrderDjangoRepository().get_by_idempotency_key(dto.idempotency_key) is not None
        )
        try:
            order = self._service.checkout(request.user.pk, dto)
        except (EmptyCart, BookNotFound, InsufficientStock, IdempotencyKeyConflict) as exc:
            return domain_error_response(exc)

        return Response(
            OrderSerializer(order).data,
            status=status.HTTP_200_OK if replayed else status.HTTP_201_CREATED,
        )
