"""
Order persistence.

``OrderStore`` owns every write to ``Order`` and ``OrderItem``. Creation is
all-or-nothing: the header, its items and (when enabled) the stock
reservation commit in one transaction. Patches are plain partial updates.
"""

import logging

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from products.models import Product

from .models import Order, OrderItem, OrderStatus
from .payments import PaymentStatusResolver
from .transitions import ORDER_TRANSITIONS

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = (
    'name',
    'email',
    'phone_number',
    'alt_phone_number',
    'country',
    'district',
    'area',
    'address_details',
)

PATCHABLE_FIELDS = ('status', 'payment_status', 'transaction_id')


class OrderStore:

    def __init__(self, payment_resolver=None):
        self.payment_resolver = payment_resolver or PaymentStatusResolver()

    def create(self, customer, quote, payment_method, transaction_id=None, image=None, user=None):
        """
        Persist a priced order.

        Args:
            customer: Mapping with the customer snapshot fields
            quote: ``orders.pricing.Quote`` produced by ``PricingEngine``
            payment_method: Payment channel token
            transaction_id: Claimed transaction id (optional, never required)
            image: Payment proof URL (optional)
            user: Owning account, None for guest checkout

        Returns:
            Order: the created order with its items
        """
        payment_status = self.payment_resolver.resolve_initial(payment_method)
        reserve_stock = getattr(settings, 'ORDER_RESERVE_STOCK', False)

        with transaction.atomic():
            if reserve_stock:
                for line in quote.items:
                    if not Product.reserve_stock(line.product_id, line.quantity):
                        raise ValidationError(
                            {'items': f"Product not enough stock for id={line.product_id} (requested={line.quantity})"}
                        )

            order = Order.objects.create(
                user=user,
                payment_method=payment_method,
                payment_status=payment_status,
                transaction_id=transaction_id or None,
                image=image or None,
                status=OrderStatus.PENDING,
                total=quote.subtotal,
                shipping_cost=quote.shipping_cost,
                **{name: customer.get(name) for name in CUSTOMER_FIELDS},
            )
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product=line.product,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
                for line in quote.items
            ])

        logger.info(
            f"Order #{order.pk} created: {len(quote.items)} item(s), grand total {order.grand_total}, "
            f"payment {payment_method}/{payment_status}"
        )
        return order

    def get(self, order_id):
        try:
            return Order.objects.prefetch_related('items__product').get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise NotFound('Order not found')

    def list(self, owner=None, status=None):
        """
        Orders newest first, optionally scoped to ``owner`` and filtered by
        ``status``. An unknown status is a validation error, not an empty list.
        """
        queryset = Order.objects.select_related('user').prefetch_related('items__product')
        if owner is not None:
            queryset = queryset.filter(user=owner)
        if status:
            ORDER_TRANSITIONS.validate_value(status)
            queryset = queryset.filter(status=status)
        return queryset.order_by('-created_at', '-id')

    def visible_to(self, user, is_admin, status=None):
        """All orders for administrators, own orders for everyone else."""
        return self.list(owner=None if is_admin else user, status=status)

    def patch(self, order_id, **fields):
        """
        Partial update of ``status``, ``payment_status`` and ``transaction_id``.

        Omitted fields are left untouched. There is no dependency on shipment
        state: an order may be marked SHIPPED with no shipment on record.
        """
        unknown = set(fields) - set(PATCHABLE_FIELDS)
        if unknown:
            raise ValidationError({'non_field_errors': f"Fields cannot be updated: {', '.join(sorted(unknown))}"})
        if not fields:
            raise ValidationError({'non_field_errors': 'No valid fields to update'})

        order = self.get(order_id)
        changes = {}

        if 'status' in fields:
            order.status = ORDER_TRANSITIONS.check(order.status, fields['status'])
            changes['status'] = order.status
        if 'payment_status' in fields:
            order.payment_status = self.payment_resolver.override(order.payment_status, fields['payment_status'])
            changes['payment_status'] = order.payment_status
        if 'transaction_id' in fields:
            order.transaction_id = fields['transaction_id'] or None
            changes['transaction_id'] = order.transaction_id

        order.save(update_fields=[*changes, 'updated_at'])
        logger.info(f"Order #{order.pk} patched: {changes}")
        return order

    def delete(self, order_id):
        order = self.get(order_id)
        order.delete()
        logger.info(f"Order #{order_id} deleted")
