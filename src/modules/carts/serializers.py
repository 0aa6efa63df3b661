"""Cart DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.carts.models import Cart, CartLine


class AddCartLineSerializer(serializers.Serializer):
    book_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, default=1, min_value=1)


class UpdateCartLineSerializer(serializers.Serializer):
    """``quantity`` of zero or less removes the line."""

    quantity = serializers.IntegerField()


class CheckoutSerializer(serializers.Serializer):
    shipping_address = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CartLineSerializer(serializers.ModelSerializer):
    title = serializers.CharField(source="book.title", read_only=True)
    author = serializers.CharField(source="book.author", read_only=True)
    unit_price = serializers.DecimalField(
        source="book.price", max_digits=10, decimal_places=2, read_only=True
    )
    available = serializers.BooleanField(source="book.is_available", read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartLine
        fields = [
            "book_id",
            "title",
            "author",
            "unit_price",
            "quantity",
            "subtotal",
            "available",
        ]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    lines = CartLineSerializer(many=True, read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Cart
        fields = ["id", "customer_id", "lines", "item_count", "subtotal", "updated_at"]
        read_only_fields = fields
