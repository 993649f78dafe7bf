from datetime import date, datetime, timezone as dt_timezone
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.exceptions import NotFound, ValidationError

from authentication.models import AuditLog
from orders.models import OrderStatus, PaymentStatus
from orders.services import OrderStore
from orders.tests.helpers import make_order
from shipments.models import Shipment, ShipmentStatus
from shipments.services import ShipmentTracker
from shipments.sync import OrderStatusSynchronizer


class ShipmentTrackerTest(TestCase):

    def setUp(self):
        self.tracker = ShipmentTracker()
        self.order = make_order()

    def test_find_by_order_without_shipment(self):
        self.assertIsNone(self.tracker.find_by_order(self.order.pk))

    def test_find_by_order_takes_earliest(self):
        first = Shipment.objects.create(order=self.order, courier='Pathao')
        Shipment.objects.create(order=self.order, courier='RedX')

        self.assertEqual(self.tracker.find_by_order(self.order.pk), first)

    def test_create_defaults_to_pending(self):
        shipment = self.tracker.create(self.order.pk, courier='Pathao', tracking_number='PA-1')

        self.assertEqual(shipment.status, ShipmentStatus.PENDING)
        self.assertEqual(shipment.order_id, self.order.pk)
        self.assertIsNone(shipment.shipped_at)
        self.assertIsNone(shipment.delivered_at)

    def test_create_for_unknown_order(self):
        with self.assertRaises(NotFound):
            self.tracker.create(999999, courier='Pathao')
        self.assertFalse(Shipment.objects.exists())

    def test_create_in_transit_stamps_shipped_at(self):
        shipment = self.tracker.create(self.order.pk, courier='Pathao', status=ShipmentStatus.IN_TRANSIT)

        self.assertIsNotNone(shipment.shipped_at)
        self.assertIsNone(shipment.delivered_at)

    def test_supplied_timestamp_is_kept(self):
        shipped_at = datetime(2024, 5, 1, 10, 0, tzinfo=dt_timezone.utc)

        shipment = self.tracker.create(
            self.order.pk, courier='Pathao', status=ShipmentStatus.IN_TRANSIT,
            shipped_at=shipped_at, expected_date=date(2024, 5, 4),
        )

        shipment.refresh_from_db()
        self.assertEqual(shipment.shipped_at, shipped_at)
        self.assertEqual(shipment.expected_date, date(2024, 5, 4))

    def test_patch_is_partial(self):
        shipment = self.tracker.create(self.order.pk, courier='Pathao', tracking_number='PA-1')

        self.tracker.patch(shipment.pk, tracking_number='PA-2')

        shipment.refresh_from_db()
        self.assertEqual(shipment.courier, 'Pathao')
        self.assertEqual(shipment.tracking_number, 'PA-2')
        self.assertEqual(shipment.status, ShipmentStatus.PENDING)

    def test_patch_delivered_stamps_delivered_at_once(self):
        shipment = self.tracker.create(self.order.pk, courier='Pathao')

        delivered = self.tracker.patch(shipment.pk, status=ShipmentStatus.DELIVERED)
        first_stamp = delivered.delivered_at
        again = self.tracker.patch(shipment.pk, status=ShipmentStatus.DELIVERED)

        self.assertIsNotNone(first_stamp)
        self.assertEqual(again.delivered_at, first_stamp)

    def test_any_status_move_is_allowed(self):
        shipment = self.tracker.create(self.order.pk, courier='Pathao', status=ShipmentStatus.DELIVERED)

        shipment = self.tracker.patch(shipment.pk, status=ShipmentStatus.PENDING)

        self.assertEqual(shipment.status, ShipmentStatus.PENDING)

    def test_patch_rejects_unknown_or_empty_fields(self):
        shipment = self.tracker.create(self.order.pk, courier='Pathao')

        with self.assertRaises(ValidationError):
            self.tracker.patch(shipment.pk, order_id=123)
        with self.assertRaises(ValidationError):
            self.tracker.patch(shipment.pk)
        with self.assertRaises(ValidationError):
            self.tracker.patch(shipment.pk, status='LOST')

    def test_patch_unknown_shipment(self):
        with self.assertRaises(NotFound):
            self.tracker.patch(999999, courier='RedX')

    def test_does_not_touch_order(self):
        self.tracker.create(self.order.pk, courier='Pathao', status=ShipmentStatus.DELIVERED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)


class OrderStatusSynchronizerTest(TestCase):

    def setUp(self):
        self.synchronizer = OrderStatusSynchronizer()
        self.order = make_order(status=OrderStatus.PROCESSING, payment_method='bkash')

    def shipment(self, status):
        return Shipment.objects.create(order=self.order, courier='Pathao', status=status)

    def test_delivered_shipment_delivers_order(self):
        shipment = self.shipment(ShipmentStatus.DELIVERED)

        order = self.synchronizer.reconcile(self.order, shipment)

        self.assertEqual(order.status, OrderStatus.DELIVERED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.DELIVERED)
        self.assertEqual(self.order.payment_status, PaymentStatus.PAID)
        self.assertTrue(
            AuditLog.objects.filter(action='RECONCILE', resource_id=str(self.order.pk)).exists()
        )

    def test_other_shipment_statuses_leave_order_alone(self):
        for status in (ShipmentStatus.IN_TRANSIT, ShipmentStatus.RETURNED, ShipmentStatus.CANCELLED):
            with self.subTest(status=status):
                self.synchronizer.reconcile(self.order, self.shipment(status))
                self.order.refresh_from_db()
                self.assertEqual(self.order.status, OrderStatus.PROCESSING)

        self.assertFalse(AuditLog.objects.filter(action='RECONCILE').exists())

    def test_missing_shipment_is_a_no_op(self):
        self.assertEqual(self.synchronizer.reconcile(self.order, None), self.order)

    def test_reconcile_safely_reports_outcome(self):
        outcome = self.synchronizer.reconcile_safely(self.order, self.shipment(ShipmentStatus.DELIVERED))

        self.assertTrue(outcome.applied)
        self.assertTrue(outcome.changed)
        self.assertIsNone(outcome.error)
        self.assertEqual(outcome.order.status, OrderStatus.DELIVERED)

    def test_reconcile_safely_swallows_storage_failure(self):
        shipment = self.shipment(ShipmentStatus.DELIVERED)

        with mock.patch.object(OrderStore, 'patch', side_effect=DatabaseError('disk full')):
            with self.assertLogs('shipments.sync', level='ERROR'):
                outcome = self.synchronizer.reconcile_safely(self.order, shipment)

        self.assertFalse(outcome.applied)
        self.assertFalse(outcome.changed)
        self.assertEqual(outcome.error, 'Internal server error')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PROCESSING)
