from unittest import mock

from django.core.cache import cache
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APITestCase

from orders.models import OrderStatus
from orders.tests.helpers import make_admin, make_order, make_user
from shipments.models import Shipment, ShipmentStatus
from shipments.services import ShipmentTracker
from shipments.sync import OrderStatusSynchronizer


def fulfillment_url(order_id):
    return f'/api/orders/{order_id}/fulfillment/'


class FulfillmentApiTest(APITestCase):

    def setUp(self):
        cache.clear()
        self.admin = make_admin()
        self.customer = make_user()
        self.order = make_order(user=self.customer, status=OrderStatus.PROCESSING)
        self.client.force_authenticate(self.admin)

    def test_merged_view_without_shipment(self):
        response = self.client.get(fulfillment_url(self.order.pk))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['id'], self.order.pk)
        self.assertIsNone(response.data['shipment'])

    def test_merged_view_with_shipment(self):
        shipment = Shipment.objects.create(order=self.order, courier='Pathao')

        response = self.client.get(fulfillment_url(self.order.pk))

        self.assertEqual(response.data['shipment']['id'], shipment.pk)

    def test_save_order_and_create_shipment(self):
        response = self.client.post(
            fulfillment_url(self.order.pk),
            {'status': OrderStatus.SHIPPED, 'shipment': {'courier': 'Pathao', 'status': ShipmentStatus.IN_TRANSIT}},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['steps'], ['order', 'shipment'])
        self.assertEqual(response.data['order']['status'], OrderStatus.SHIPPED)
        self.assertEqual(response.data['shipment']['courier'], 'Pathao')
        self.assertIsNotNone(response.data['shipment']['shippedAt'])
        self.assertEqual(
            response.data['reconciliation'], {'applied': True, 'changed': False, 'error': None}
        )
        self.assertFalse(response.data['replayed'])

    def test_delivered_shipment_forces_order_delivered(self):
        Shipment.objects.create(order=self.order, courier='Pathao', status=ShipmentStatus.OUT_FOR_DELIVERY)

        response = self.client.post(
            fulfillment_url(self.order.pk),
            {'status': OrderStatus.CANCELLED, 'shipment': {'status': ShipmentStatus.DELIVERED}},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['status'], OrderStatus.DELIVERED)
        self.assertTrue(response.data['reconciliation']['changed'])
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.DELIVERED)

    def test_shipment_failure_reports_committed_steps(self):
        shipment = Shipment.objects.create(order=self.order, courier='Pathao')

        with mock.patch.object(ShipmentTracker, 'patch', side_effect=DatabaseError('locked')):
            response = self.client.post(
                fulfillment_url(self.order.pk),
                {'status': OrderStatus.SHIPPED, 'shipment': {'status': ShipmentStatus.IN_TRANSIT}},
                format='json',
            )

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['step'], 'shipment')
        self.assertEqual(response.data['committed'], ['order'])
        self.assertEqual(response.data['error'], 'Shipment update failed: Internal server error')

        refetched = self.client.get(fulfillment_url(self.order.pk))
        self.assertEqual(refetched.data['order']['status'], OrderStatus.SHIPPED)
        self.assertEqual(refetched.data['shipment']['status'], ShipmentStatus.PENDING)
        shipment.refresh_from_db()
        self.assertEqual(shipment.status, ShipmentStatus.PENDING)

    def test_reconciliation_failure_still_succeeds(self):
        with mock.patch.object(OrderStatusSynchronizer, 'reconcile', side_effect=DatabaseError('locked')):
            response = self.client.post(
                fulfillment_url(self.order.pk),
                {'shipment': {'courier': 'Pathao', 'status': ShipmentStatus.DELIVERED}},
                format='json',
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['reconciliation']['applied'])
        self.assertEqual(response.data['reconciliation']['error'], 'Internal server error')
        self.assertEqual(response.data['shipment']['status'], ShipmentStatus.DELIVERED)
        self.assertEqual(response.data['order']['status'], OrderStatus.PROCESSING)

    def test_invalid_status_rejected_before_any_write(self):
        response = self.client.post(
            fulfillment_url(self.order.pk),
            {'status': 'LOST', 'shipment': {'courier': 'Pathao'}},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Shipment.objects.exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PROCESSING)

    def test_idempotent_retry(self):
        body = {'shipment': {'courier': 'Pathao', 'trackingNumber': 'PA-7'}}

        first = self.client.post(fulfillment_url(self.order.pk), body, format='json', HTTP_IDEMPOTENCY_KEY='k-1')
        second = self.client.post(fulfillment_url(self.order.pk), body, format='json', HTTP_IDEMPOTENCY_KEY='k-1')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertTrue(second.data['replayed'])
        self.assertEqual(second.data['shipment'], first.data['shipment'])
        self.assertEqual(Shipment.objects.count(), 1)

    def test_unknown_order(self):
        response = self.client.post(fulfillment_url(999999), {'status': OrderStatus.SHIPPED}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_only(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get(fulfillment_url(self.order.pk)).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(None)
        self.assertEqual(self.client.get(fulfillment_url(self.order.pk)).status_code, status.HTTP_401_UNAUTHORIZED)
