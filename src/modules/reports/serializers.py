"""Query-parameter serializers for the reporting endpoints."""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import PaymentStatus


class SalesSummaryParamsSerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    payment_status = serializers.MultipleChoiceField(
        choices=PaymentStatus.choices, required=False
    )
    top_n = serializers.IntegerField(required=False, min_value=1, max_value=100)

    def validate(self, attrs):
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and start > end:
            raise serializers.ValidationError({"end": "end must not be before start."})
        return attrs


class RevenueParamsSerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=1, max_value=366)
