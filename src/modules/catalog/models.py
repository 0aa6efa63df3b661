"""Book model: the sellable unit of the catalog.

Business rules implemented:
- ``stock`` never goes below zero (PositiveIntegerField + check constraint).
- ``price`` is never negative.
- ``is_active`` follows stock: a book with no stock is never on sale.
- An admin can pin a book off sale with ``manually_deactivated``; the pin
  survives restocking until it is explicitly cleared.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel
from shared.domain.events import DomainEventMixin


class Book(DomainEventMixin, SoftDeleteModel):
    """Catalog entry for a single title."""

    title = models.CharField(max_length=255)
    author = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, default="")
    description = models.TextField(blank=True, default="")
    publish_year = models.PositiveSmallIntegerField(null=True, blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    manually_deactivated = models.BooleanField(default=False)

    class Meta:
        db_table = "books"
        ordering = ["title", "id"]
        indexes = [
            models.Index(fields=["is_active"], name="books_is_active_idx"),
            models.Index(fields=["category"], name="books_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="books_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="books_stock_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})

    def refresh_active(self) -> bool:
        """Recompute ``is_active`` from stock and the manual pin."""
        self.is_active = self.stock > 0 and not self.manually_deactivated
        return self.is_active

    @property
    def is_available(self) -> bool:
        return self.is_active and not self.is_deleted

    def __str__(self) -> str:
        return f"{self.title} ({self.author})"
