"""
Shipment endpoints for the bookstore API.

- Administrators open, update and delete shipments
- Customers read the shipments of their own orders
- Every shipment write is followed by order status reconciliation
"""

from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from authentication.audit import log_audit_event
from authentication.permissions import IsAdminRole, IsOwnerOrAdmin, is_admin

from .filters import ShipmentFilter
from .serializers import ShipmentCreateSerializer, ShipmentPatchSerializer, ShipmentSerializer
from .services import ShipmentTracker
from .sync import OrderStatusSynchronizer


class ShipmentViewSet(viewsets.ModelViewSet):
    """
    ViewSet for shipments.

    A failed reconciliation does not undo the shipment write; it is logged
    and the shipment is returned as saved.
    """

    serializer_class = ShipmentSerializer
    filterset_class = ShipmentFilter
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    lookup_value_regex = r'\d+'
    results_key = 'shipments'

    tracker_class = ShipmentTracker
    synchronizer_class = OrderStatusSynchronizer

    def get_tracker(self):
        return self.tracker_class()

    def get_permissions(self):
        if self.action in ('create', 'partial_update', 'destroy'):
            return [IsAdminRole()]
        return [IsOwnerOrAdmin()]

    def get_queryset(self):
        user = self.request.user
        return self.get_tracker().visible_to(user, is_admin(user))

    def get_object(self):
        shipment = self.get_tracker().get(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, shipment)
        return shipment

    def get_owner_id(self, shipment):
        return shipment.order.user_id

    def _reconcile(self, shipment):
        return self.synchronizer_class().reconcile_safely(shipment.order, shipment, request=self.request)

    @method_decorator(ratelimit(key='user', rate='20/m', method='POST'))
    def create(self, request, *args, **kwargs):
        serializer = ShipmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        order_id = fields.pop('order_id')

        tracker = self.get_tracker()
        if tracker.find_by_order(order_id) is not None:
            raise ValidationError({'orderId': 'Shipment already exists for this order'})

        shipment = tracker.create(order_id, **fields)
        self._reconcile(shipment)

        log_audit_event(request, 'CREATE', 'SHIPMENT', shipment.pk, 'SUCCESS', {'order_id': order_id})
        return Response(ShipmentSerializer(shipment).data, status=status.HTTP_201_CREATED)

    @method_decorator(ratelimit(key='user', rate='20/m', method='PATCH'))
    def partial_update(self, request, *args, **kwargs):
        serializer = ShipmentPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        shipment = self.get_tracker().patch(self.kwargs[self.lookup_field], **serializer.validated_data)
        self._reconcile(shipment)

        log_audit_event(
            request, 'UPDATE', 'SHIPMENT', shipment.pk, 'SUCCESS',
            {'fields': sorted(serializer.validated_data)},
        )
        return Response(ShipmentSerializer(shipment).data)

    def destroy(self, request, *args, **kwargs):
        shipment_id = self.kwargs[self.lookup_field]
        self.get_tracker().delete(shipment_id)
        log_audit_event(request, 'DELETE', 'SHIPMENT', shipment_id, 'SUCCESS')
        return Response(status=status.HTTP_204_NO_CONTENT)
