"""
Catalog serializers.

The catalog is read-only through this API; these shapes are what checkout and
order detail pages consume.
"""

from rest_framework import serializers

from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    is_in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id',
            'name',
            'description',
            'sku',
            'price',
            'original_price',
            'stock_quantity',
            'is_available',
            'is_in_stock',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ProductSummarySerializer(serializers.ModelSerializer):
    """Compact product shape nested under order items."""

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'price']
        read_only_fields = fields
