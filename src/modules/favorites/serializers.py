"""Favorite DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.favorites.models import Favorite
from modules.products.models import Product


class AddFavoriteSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


class FavoriteProductSerializer(serializers.ModelSerializer):
    image_url = serializers.CharField(source="primary_image_url", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "cutting_price",
            "seedling_price",
            "variety",
            "in_stock",
            "image_url",
        ]
        read_only_fields = fields


class FavoriteSerializer(serializers.ModelSerializer):
    product = FavoriteProductSerializer(read_only=True)

    class Meta:
        model = Favorite
        fields = ["id", "product", "created_at"]
        read_only_fields = fields
