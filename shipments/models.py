"""
Shipment model.

A shipment tracks the physical delivery of an order independently from the
order's commercial status. An order has at most one shipment by convention;
the table does not enforce it, and readers take the earliest one.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ShipmentStatus(models.TextChoices):
    PENDING = 'PENDING', _('Pending')
    IN_TRANSIT = 'IN_TRANSIT', _('In transit')
    OUT_FOR_DELIVERY = 'OUT_FOR_DELIVERY', _('Out for delivery')
    DELIVERED = 'DELIVERED', _('Delivered')
    RETURNED = 'RETURNED', _('Returned')
    CANCELLED = 'CANCELLED', _('Cancelled')


class Shipment(models.Model):

    ShipmentStatus = ShipmentStatus

    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.CASCADE,
        related_name='shipments',
    )
    courier = models.CharField(max_length=100, blank=True, null=True)
    tracking_number = models.CharField(max_length=100, blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=ShipmentStatus.choices,
        default=ShipmentStatus.PENDING,
        db_index=True,
    )
    shipped_at = models.DateTimeField(null=True, blank=True)
    expected_date = models.DateField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['order', 'created_at'], name='shipment_order_created_idx'),
        ]
        verbose_name = _("Shipment")
        verbose_name_plural = _("Shipments")

    def __str__(self):
        return f"Shipment #{self.pk} for Order #{self.order_id} ({self.status})"
