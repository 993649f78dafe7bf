"""
Back-office "save" for an order and its shipment.

One save runs up to three writes in order, each committed on its own:

1. order fields (status, payment status, transaction id)
2. the shipment, patched if one exists, created if not
3. order status reconciliation against the shipment

There is no enclosing transaction. A failed step 1 leaves nothing written. A
failed step 2 leaves step 1 in place and raises ``FulfillmentStepError``
naming what did commit. A failed step 3 is reported in the result and the
save still succeeds.

Retries are made safe with an idempotency key: the result of a successful
save is cached per order and key and handed back without running again.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError
from rest_framework.exceptions import APIException

from bookstore_project.exceptions import FulfillmentStepError
from orders.models import Order
from orders.services import OrderStore
from shipments.models import Shipment, ShipmentStatus
from shipments.services import ShipmentTracker
from shipments.sync import OrderStatusSynchronizer, ReconciliationOutcome

logger = logging.getLogger(__name__)

ORDER_STEP = 'order'
SHIPMENT_STEP = 'shipment'


@dataclass
class FulfillmentResult:
    order: Order
    shipment: Optional[Shipment]
    reconciliation: ReconciliationOutcome
    steps: List[str] = field(default_factory=list)
    replayed: bool = False


def is_blank_shipment(fields):
    """True when nothing worth a new shipment row was submitted."""
    for name, value in fields.items():
        if name == 'status':
            if value and value != ShipmentStatus.PENDING:
                return False
        elif value not in (None, ''):
            return False
    return True


class FulfillmentCoordinator:

    def __init__(self, order_store=None, tracker=None, synchronizer=None):
        self.order_store = order_store or OrderStore()
        self.tracker = tracker or ShipmentTracker(order_store=self.order_store)
        self.synchronizer = synchronizer or OrderStatusSynchronizer(order_store=self.order_store)

    @staticmethod
    def cache_key(order_id, idempotency_key):
        return f'fulfillment:{order_id}:{idempotency_key}'

    def load(self, order_id):
        """Current order and its shipment (None when not shipped yet)."""
        order = self.order_store.get(order_id)
        return order, self.tracker.find_by_order(order.pk)

    def save(self, order_id, order_fields=None, shipment_fields=None, idempotency_key=None, request=None):
        """
        Run the three-step save.

        Args:
            order_id: Order to save
            order_fields: Order columns to patch; empty skips step 1
            shipment_fields: Shipment columns to patch or create with
            idempotency_key: Optional client key; a repeated key replays the
                first successful result
            request: Request for audit events

        Returns:
            FulfillmentResult

        Raises:
            NotFound: the order does not exist
            FulfillmentStepError: step 1 or step 2 failed
        """
        order_fields = dict(order_fields or {})
        shipment_fields = dict(shipment_fields or {})

        if idempotency_key:
            cached = cache.get(self.cache_key(order_id, idempotency_key))
            if cached is not None:
                logger.info(f"Fulfillment save for Order #{order_id} replayed (key {idempotency_key})")
                return replace(cached, replayed=True)

        order = self.order_store.get(order_id)
        committed = []

        if order_fields:
            try:
                order = self.order_store.patch(order.pk, **order_fields)
            except (APIException, DatabaseError) as e:
                logger.warning(f"Fulfillment save for Order #{order.pk} failed at step '{ORDER_STEP}': {e}")
                raise FulfillmentStepError(ORDER_STEP, committed, e) from e
            committed.append(ORDER_STEP)

        try:
            shipment, written = self._save_shipment(order, shipment_fields)
        except (APIException, DatabaseError) as e:
            logger.error(
                f"Fulfillment save for Order #{order.pk} failed at step '{SHIPMENT_STEP}' "
                f"after committing {committed}: {e}"
            )
            raise FulfillmentStepError(SHIPMENT_STEP, committed, e) from e
        if written:
            committed.append(SHIPMENT_STEP)

        reconciliation = self.synchronizer.reconcile_safely(order, shipment, request=request)
        result = FulfillmentResult(
            order=reconciliation.order,
            shipment=shipment,
            reconciliation=reconciliation,
            steps=committed,
        )

        if idempotency_key:
            cache.set(
                self.cache_key(order_id, idempotency_key),
                result,
                getattr(settings, 'FULFILLMENT_IDEMPOTENCY_TTL', 86400),
            )

        logger.info(f"Fulfillment save for Order #{order.pk} committed {committed}")
        return result

    def _save_shipment(self, order, fields):
        """Returns ``(shipment, written)``."""
        shipment = self.tracker.find_by_order(order.pk)

        if shipment is not None:
            if not fields:
                return shipment, False
            return self.tracker.patch(shipment.pk, **fields), True

        if is_blank_shipment(fields):
            return None, False
        return self.tracker.create(order.pk, **fields), True
