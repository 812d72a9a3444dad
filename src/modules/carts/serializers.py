"""Cart DRF serializers for API input.

Outputs are rendered from ``CartViewDTO`` directly.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.carts.constants import MAX_LINE_QUANTITY
from modules.products.constants import ProductVariant


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    variant = serializers.ChoiceField(choices=ProductVariant.choices)
    quantity = serializers.IntegerField(
        min_value=1, max_value=MAX_LINE_QUANTITY, required=False, default=1
    )


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)


class MigrateCartSerializer(serializers.Serializer):
    """``guest_id`` may also be sent in the guest header instead."""

    guest_id = serializers.CharField(required=False, max_length=64)
