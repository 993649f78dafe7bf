"""
Back-office fulfillment endpoint: ``/api/orders/{id}/fulfillment/``.

GET returns the order together with its shipment. POST saves both in one
call through ``FulfillmentCoordinator``; clients that may retry send an
``Idempotency-Key`` header.
"""

from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.audit import log_audit_event
from authentication.permissions import IsAdminRole

from .coordinator import FulfillmentCoordinator
from .serializers import FulfillmentResultSerializer, FulfillmentSaveSerializer, FulfillmentSerializer

IDEMPOTENCY_HEADER = 'Idempotency-Key'


class FulfillmentView(APIView):
    permission_classes = [IsAdminRole]
    coordinator_class = FulfillmentCoordinator

    def get_coordinator(self):
        return self.coordinator_class()

    def get(self, request, order_id):
        order, shipment = self.get_coordinator().load(order_id)
        return Response(FulfillmentSerializer({'order': order, 'shipment': shipment}).data)

    @method_decorator(ratelimit(key='user', rate='20/m', method='POST'))
    def post(self, request, order_id):
        serializer = FulfillmentSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order_fields = dict(serializer.validated_data)
        shipment_fields = order_fields.pop('shipment', {})

        result = self.get_coordinator().save(
            order_id,
            order_fields,
            shipment_fields,
            idempotency_key=request.headers.get(IDEMPOTENCY_HEADER),
            request=request,
        )

        if not result.replayed:
            log_audit_event(
                request, 'FULFILLMENT_SAVE', 'ORDER', order_id, 'SUCCESS',
                {
                    'steps': result.steps,
                    'reconciliation_applied': result.reconciliation.applied,
                    'shipment_id': result.shipment.pk if result.shipment else None,
                },
            )
        return Response(FulfillmentResultSerializer(result).data)
