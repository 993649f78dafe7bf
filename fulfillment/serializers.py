from rest_framework import serializers

from orders.models import OrderStatus, PaymentStatus
from orders.serializers import OrderSerializer
from shipments.serializers import ShipmentFieldsSerializer, ShipmentSerializer


class FulfillmentSaveSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    paymentStatus = serializers.ChoiceField(source='payment_status', choices=PaymentStatus.choices, required=False)
    transactionId = serializers.CharField(
        source='transaction_id', max_length=100, required=False, allow_blank=True, allow_null=True,
    )
    shipment = ShipmentFieldsSerializer(required=False)


class ReconciliationSerializer(serializers.Serializer):
    applied = serializers.BooleanField()
    changed = serializers.BooleanField()
    error = serializers.CharField(allow_null=True)


class FulfillmentSerializer(serializers.Serializer):
    """Merged order + shipment view used by the back-office order screen."""

    order = OrderSerializer()
    shipment = ShipmentSerializer(allow_null=True)


class FulfillmentResultSerializer(FulfillmentSerializer):
    steps = serializers.ListField(child=serializers.CharField())
    reconciliation = ReconciliationSerializer()
    replayed = serializers.BooleanField()
