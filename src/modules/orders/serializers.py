"""Order DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderLine, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class DecisionSerializer(serializers.Serializer):
    """Optional note attached to an approve/reject decision."""

    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderLineSerializer(serializers.ModelSerializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderLine
        fields = ["id", "book_id", "quantity", "unit_price", "subtotal"]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "user_id",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested lines and history."""

    lines = OrderLineSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "status",
            "payment_status",
            "payment_method",
            "total_amount",
            "shipping_address",
            "notes",
            "created_at",
            "updated_at",
            "decided_at",
            "lines",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested history)."""

    line_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "status",
            "payment_status",
            "total_amount",
            "line_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_line_count(self, obj: Order) -> int:
        return len(obj.lines.all())
