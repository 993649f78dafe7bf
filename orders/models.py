"""
Order models for the bookstore.

An ``Order`` is one purchase: a snapshot of who bought and where it ships,
the totals computed at creation, the payment channel and its status, and the
commercial status an administrator moves through the lifecycle. ``OrderItem``
rows freeze the unit price at the moment of purchase.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class OrderStatus(models.TextChoices):
    PENDING = 'PENDING', _('Pending')
    PROCESSING = 'PROCESSING', _('Processing')
    SHIPPED = 'SHIPPED', _('Shipped')
    DELIVERED = 'DELIVERED', _('Delivered')
    CANCELLED = 'CANCELLED', _('Cancelled')


class PaymentStatus(models.TextChoices):
    UNPAID = 'UNPAID', _('Unpaid')
    PAID = 'PAID', _('Paid')


class Order(models.Model):
    """
    A customer purchase.

    The customer fields are a snapshot taken at checkout and are never synced
    from the account profile. ``grand_total`` is always recomputed from
    ``total`` and ``shipping_cost`` on save.
    """

    # Kept importable from the model, like Django's own TextChoices pattern.
    OrderStatus = OrderStatus
    PaymentStatus = PaymentStatus

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
        help_text=_("Owning account; empty for guest checkout"),
    )

    # Customer snapshot
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, null=True)
    phone_number = models.CharField(max_length=20)
    alt_phone_number = models.CharField(max_length=20, blank=True, null=True)
    country = models.CharField(max_length=100)
    district = models.CharField(max_length=100)
    area = models.CharField(max_length=100)
    address_details = models.TextField()

    # Totals
    total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text=_("Sum of item price x quantity at order time"),
    )
    shipping_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    grand_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("total + shipping_cost"),
    )

    # Payment
    payment_method = models.CharField(max_length=50)
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
        db_index=True,
    )
    transaction_id = models.CharField(max_length=100, blank=True, null=True)
    image = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text=_("URL of the payment proof screenshot"),
    )

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='order_user_created_idx'),
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")

    def __str__(self):
        return f"Order #{self.pk} - {self.name} - {self.grand_total}"

    def calculate_grand_total(self) -> Decimal:
        return self.total + self.shipping_cost

    def save(self, *args, **kwargs):
        """Recompute ``grand_total`` so it can never drift from its parts."""
        self.grand_total = self.calculate_grand_total()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'grand_total' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['grand_total']
        super().save(*args, **kwargs)


class OrderItem(models.Model):
    """
    One line of an order. Immutable after the order is placed.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items',
    )
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='order_items',
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Unit price at order time (snapshot)"),
    )

    class Meta:
        ordering = ['id']
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")

    def __str__(self):
        return f"{self.quantity}x product {self.product_id} in Order #{self.order_id}"

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
