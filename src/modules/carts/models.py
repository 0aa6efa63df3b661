"""Cart and CartLine models.

- One cart per customer, created lazily on first access.
- One line per (cart, book); adding the same book again bumps the quantity.
- Line quantities are always positive; a line set to zero is deleted.
- Prices are not stored on the cart: they are read live from the catalog
  and captured only when the cart is checked out.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class Cart(BaseModel):
    """Shopping cart owned by exactly one customer."""

    customer = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    class Meta:
        db_table = "carts"

    @property
    def subtotal(self) -> Decimal:
        """Advisory total at current catalog prices."""
        return sum((line.subtotal for line in self.lines.all()), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines.all())

    def __str__(self) -> str:
        return f"Cart of {self.customer_id}"


class CartLine(BaseModel):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="lines")
    book = models.ForeignKey(
        "catalog.Book",
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        db_table = "cart_lines"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "book"], name="cart_lines_unique_book"
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_lines_quantity_positive",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.book.price * self.quantity

    def __str__(self) -> str:
        return f"{self.quantity}x {self.book_id}"
