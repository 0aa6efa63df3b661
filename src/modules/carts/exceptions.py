"""Cart domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class CartLineNotFound(NotFound):
    """The cart has no line for the requested book."""


class EmptyCart(DomainError):
    """The cart has no lines to check out."""

    code = "empty_cart"


class IdempotencyKeyConflict(DomainError):
    """The idempotency key was already used by a different customer."""

    code = "idempotency_conflict"
