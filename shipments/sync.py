"""
Keeps an order's status consistent with its shipment.

The only rule: a DELIVERED shipment forces its order to DELIVERED. Returned or
cancelled shipments never touch the order, and payment status is a separate
axis that is left alone.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError
from rest_framework.exceptions import APIException

from authentication.audit import log_audit_event
from bookstore_project.exceptions import UpstreamPersistenceError, first_error_message
from orders.models import Order, OrderStatus
from orders.services import OrderStore

from .models import ShipmentStatus

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationOutcome:
    order: Order
    applied: bool
    changed: bool = False
    error: Optional[str] = None


class OrderStatusSynchronizer:

    def __init__(self, order_store=None):
        self.order_store = order_store or OrderStore()

    def reconcile(self, order, shipment, request=None):
        """
        Move ``order`` to DELIVERED when ``shipment`` is DELIVERED.

        Returns the order as it stands afterwards. No-op for any other
        combination.
        """
        if shipment is None or shipment.status != ShipmentStatus.DELIVERED:
            return order
        if order.status == OrderStatus.DELIVERED:
            return order

        previous = order.status
        order = self.order_store.patch(order.pk, status=OrderStatus.DELIVERED)
        logger.info(f"Order #{order.pk} reconciled from {previous} to DELIVERED by Shipment #{shipment.pk}")
        log_audit_event(
            request, 'RECONCILE', 'ORDER', order.pk, 'SUCCESS',
            {'shipment_id': shipment.pk, 'from_status': previous, 'to_status': order.status},
        )
        return order

    def reconcile_safely(self, order, shipment, request=None):
        """
        ``reconcile`` for callers whose own write has already committed.

        A failure is logged and reported in the outcome instead of raised.
        """
        previous = order.status
        try:
            reconciled = self.reconcile(order, shipment, request=request)
        except (APIException, DatabaseError) as e:
            if isinstance(e, APIException):
                message = first_error_message(e.detail)
            else:
                message = UpstreamPersistenceError.default_detail
            logger.exception(
                f"Reconciliation of Order #{order.pk} with Shipment #{shipment.pk if shipment else None} failed"
            )
            return ReconciliationOutcome(order=order, applied=False, error=message)

        return ReconciliationOutcome(order=reconciled, applied=True, changed=reconciled.status != previous)
