"""
Order serializers for the bookstore API.

Field names follow the storefront's wire format (``paymentStatus``,
``transactionId``, ``orderItems`` next to snake_case address fields).
Request serializers only check shape; prices, totals and payment status are
always computed server-side.
"""

from django.conf import settings
from rest_framework import serializers

from products.serializers import ProductSummarySerializer

from .models import Order, OrderItem, OrderStatus, PaymentStatus
from .payments import CASH_ON_DELIVERY


class OrderItemSerializer(serializers.ModelSerializer):
    productId = serializers.IntegerField(source='product_id', read_only=True)
    product = ProductSummarySerializer(read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'productId', 'quantity', 'price', 'line_total', 'product']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    paymentStatus = serializers.CharField(source='payment_status', read_only=True)
    transactionId = serializers.CharField(source='transaction_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    orderItems = OrderItemSerializer(source='items', many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'userId',
            'name',
            'email',
            'phone_number',
            'alt_phone_number',
            'country',
            'district',
            'area',
            'address_details',
            'total',
            'shipping_cost',
            'grand_total',
            'payment_method',
            'paymentStatus',
            'transactionId',
            'image',
            'status',
            'createdAt',
            'updatedAt',
            'orderItems',
        ]
        read_only_fields = fields


class OrderLinesSerializer(serializers.Serializer):
    """
    Cart lines as sent by checkout. Each entry is kept as-is so
    ``PricingEngine`` can reject non-integer quantities instead of coercing.
    """

    items = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class OrderCreateSerializer(OrderLinesSerializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    phone_number = serializers.CharField(max_length=20)
    alt_phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    country = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100)
    area = serializers.CharField(max_length=100)
    address_details = serializers.CharField()
    payment_method = serializers.CharField(max_length=50)
    transactionId = serializers.CharField(
        source='transaction_id', max_length=100, required=False, allow_blank=True, allow_null=True,
    )
    image = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        # The checkout UI insists on a screenshot for online payments; the API
        # only does so when configured to.
        if getattr(settings, 'ORDER_REQUIRE_PAYMENT_PROOF', False):
            if attrs['payment_method'] != CASH_ON_DELIVERY and not attrs.get('image'):
                raise serializers.ValidationError(
                    {'image': 'Payment screenshot is required for online payments.'}
                )
        return attrs


class OrderPatchSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    paymentStatus = serializers.ChoiceField(source='payment_status', choices=PaymentStatus.choices, required=False)
    transactionId = serializers.CharField(
        source='transaction_id', max_length=100, required=False, allow_blank=True, allow_null=True,
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No valid fields to update')
        return attrs


class PricedLineSerializer(serializers.Serializer):
    productId = serializers.IntegerField(source='product_id')
    name = serializers.CharField(source='product.name')
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class QuoteSerializer(serializers.Serializer):
    items = PricedLineSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2)
