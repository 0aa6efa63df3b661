"""Cart URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.carts.views import CartLineDetailView, CartLinesView, CartView, CheckoutView

urlpatterns = [
    path("cart/", CartView.as_view(), name="cart"),
    path("cart/lines/", CartLinesView.as_view(), name="cart-lines"),
    path(
        "cart/lines/<uuid:book_id>/",
        CartLineDetailView.as_view(),
        name="cart-line-detail",
    ),
    path("cart/checkout/", CheckoutView.as_view(), name="cart-checkout"),
]
