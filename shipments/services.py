"""
Shipment persistence.

``ShipmentTracker`` owns every write to ``Shipment``. It knows nothing about
the order's status; keeping the two consistent is the job of
``shipments.sync.OrderStatusSynchronizer``.
"""

import logging

from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from orders.services import OrderStore
from orders.transitions import TransitionTable

from .models import Shipment, ShipmentStatus

logger = logging.getLogger(__name__)

SHIPMENT_FIELDS = (
    'courier',
    'tracking_number',
    'status',
    'shipped_at',
    'expected_date',
    'delivered_at',
)

TEXT_FIELDS = ('courier', 'tracking_number')

SHIPMENT_TRANSITIONS = TransitionTable('shipment', ShipmentStatus)

# status -> timestamp stamped on first entry into that status
STAMPED_ON = {
    ShipmentStatus.IN_TRANSIT: 'shipped_at',
    ShipmentStatus.OUT_FOR_DELIVERY: 'shipped_at',
    ShipmentStatus.DELIVERED: 'delivered_at',
}


class ShipmentTracker:

    def __init__(self, order_store=None):
        self.order_store = order_store or OrderStore()

    def find_by_order(self, order_id):
        """The order's shipment, or None. With several on record the earliest wins."""
        return (
            Shipment.objects.select_related('order')
            .filter(order_id=order_id)
            .order_by('created_at', 'id')
            .first()
        )

    def get(self, shipment_id):
        try:
            return Shipment.objects.select_related('order').get(pk=shipment_id)
        except (Shipment.DoesNotExist, ValueError, TypeError):
            raise NotFound('Shipment not found')

    def visible_to(self, user, is_admin):
        """All shipments for administrators, shipments of own orders otherwise."""
        queryset = Shipment.objects.select_related('order')
        if not is_admin:
            queryset = queryset.filter(order__user=user)
        return queryset.order_by('-created_at', '-id')

    def create(self, order_id, courier=None, tracking_number=None, status=ShipmentStatus.PENDING,
               shipped_at=None, expected_date=None, delivered_at=None):
        """
        Open a shipment for an existing order.

        Raises:
            NotFound: the order does not exist
            ValidationError: ``status`` is not a shipment status
        """
        order = self.order_store.get(order_id)
        status = SHIPMENT_TRANSITIONS.validate_value(status or ShipmentStatus.PENDING)

        shipment = Shipment(
            order=order,
            courier=courier or None,
            tracking_number=tracking_number or None,
            status=status,
            shipped_at=shipped_at,
            expected_date=expected_date,
            delivered_at=delivered_at,
        )
        supplied = {'shipped_at'} if shipped_at else set()
        if delivered_at:
            supplied.add('delivered_at')
        self._stamp(shipment, supplied)
        shipment.save()

        logger.info(f"Shipment #{shipment.pk} created for Order #{order.pk} ({shipment.status})")
        return shipment

    def patch(self, shipment_id, **fields):
        """
        Partial update. Omitted fields are left untouched; blank text clears
        the column. Status may move freely between any two shipment statuses.
        """
        unknown = set(fields) - set(SHIPMENT_FIELDS)
        if unknown:
            raise ValidationError({'non_field_errors': f"Fields cannot be updated: {', '.join(sorted(unknown))}"})
        if not fields:
            raise ValidationError({'non_field_errors': 'No valid fields to update'})

        shipment = self.get(shipment_id)

        if 'status' in fields:
            shipment.status = SHIPMENT_TRANSITIONS.check(shipment.status, fields['status'])
        for name in SHIPMENT_FIELDS:
            if name == 'status' or name not in fields:
                continue
            value = fields[name]
            if name in TEXT_FIELDS:
                value = value or None
            setattr(shipment, name, value)

        stamped = self._stamp(shipment, set(fields)) if 'status' in fields else []
        shipment.save(update_fields=[*fields, *stamped, 'updated_at'])

        logger.info(f"Shipment #{shipment.pk} patched: {sorted(fields)}")
        return shipment

    def delete(self, shipment_id):
        shipment = self.get(shipment_id)
        shipment.delete()
        logger.info(f"Shipment #{shipment_id} deleted")

    @staticmethod
    def _stamp(shipment, supplied):
        """Fill the timestamp that belongs to the current status if still empty."""
        name = STAMPED_ON.get(shipment.status)
        if name is None or name in supplied or getattr(shipment, name):
            return []
        setattr(shipment, name, timezone.now())
        return [name]
