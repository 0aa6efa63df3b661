"""Django ORM implementation of the Cart repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.carts.models import Cart, CartLine
from modules.carts.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    """Concrete Cart repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Cart]:
        try:
            return Cart.objects.prefetch_related("lines__book").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Cart]:
        queryset = Cart.objects.prefetch_related("lines__book")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Cart) -> Cart:
        entity.save()
        return entity

    def get_for_customer(self, customer_id: int) -> Cart:
        cart, created = Cart.objects.get_or_create(customer_id=customer_id)
        if created:
            logger.info("cart.created", customer_id=customer_id)
        return Cart.objects.prefetch_related("lines__book").get(id=cart.id)

    def get_for_update(self, customer_id: int) -> Cart:
        """Must be called inside ``transaction.atomic``."""
        cart, created = Cart.objects.get_or_create(customer_id=customer_id)
        if created:
            logger.info("cart.created", customer_id=customer_id)
        return (
            Cart.objects.select_for_update()
            .prefetch_related("lines__book")
            .get(id=cart.id)
        )

    def get_line(self, cart: Cart, book_id: UUID) -> Optional[CartLine]:
        try:
            return (
                CartLine.objects.select_related("book")
                .filter(cart=cart, book_id=book_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def save_line(self, line: CartLine) -> CartLine:
        line.save()
        return line

    def delete_line(self, cart: Cart, book_id: UUID) -> int:
        try:
            deleted, _ = CartLine.objects.filter(cart=cart, book_id=book_id).delete()
        except (ValueError, ValidationError):
            return 0
        return deleted

    def clear(self, cart: Cart) -> int:
        deleted, _ = CartLine.objects.filter(cart=cart).delete()
        return deleted

    def remove_book_everywhere(self, book_id: UUID) -> int:
        deleted, _ = CartLine.objects.filter(book_id=book_id).delete()
        if deleted:
            logger.info("cart.book_removed_everywhere", book_id=str(book_id), lines=deleted)
        return deleted
