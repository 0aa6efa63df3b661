"""Book DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Book


class BookSerializer(serializers.ModelSerializer):
    """Read serializer for the Book resource."""

    class Meta:
        model = Book
        fields = [
            "id",
            "title",
            "author",
            "category",
            "description",
            "publish_year",
            "price",
            "stock",
            "is_active",
            "manually_deactivated",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CreateBookSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    author = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    category = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    description = serializers.CharField(required=False, default="", allow_blank=True)
    publish_year = serializers.IntegerField(
        required=False, allow_null=True, default=None, min_value=0
    )
    stock = serializers.IntegerField(required=False, default=0, min_value=0)


class UpdateBookSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    author = serializers.CharField(max_length=255, required=False)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    publish_year = serializers.IntegerField(required=False, min_value=0)
    stock = serializers.IntegerField(required=False, min_value=0)


class SetActiveSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
