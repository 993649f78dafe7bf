from rest_framework import serializers

from .models import Shipment, ShipmentStatus


class ShipmentSerializer(serializers.ModelSerializer):
    orderId = serializers.IntegerField(source='order_id', read_only=True)
    trackingNumber = serializers.CharField(source='tracking_number', read_only=True)
    shippedAt = serializers.DateTimeField(source='shipped_at', read_only=True)
    expectedDate = serializers.DateField(source='expected_date', read_only=True)
    deliveredAt = serializers.DateTimeField(source='delivered_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Shipment
        fields = [
            'id',
            'orderId',
            'courier',
            'trackingNumber',
            'status',
            'shippedAt',
            'expectedDate',
            'deliveredAt',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields


class ShipmentFieldsSerializer(serializers.Serializer):
    """Writable shipment fields; every one optional."""

    courier = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    trackingNumber = serializers.CharField(
        source='tracking_number', max_length=100, required=False, allow_blank=True, allow_null=True,
    )
    status = serializers.ChoiceField(choices=ShipmentStatus.choices, required=False)
    shippedAt = serializers.DateTimeField(source='shipped_at', required=False, allow_null=True)
    expectedDate = serializers.DateField(source='expected_date', required=False, allow_null=True)
    deliveredAt = serializers.DateTimeField(source='delivered_at', required=False, allow_null=True)


class ShipmentCreateSerializer(ShipmentFieldsSerializer):
    orderId = serializers.IntegerField(source='order_id')
    courier = serializers.CharField(max_length=100)


class ShipmentPatchSerializer(ShipmentFieldsSerializer):

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No valid fields to update')
        return attrs
