"""
Server-side order pricing.

``PricingEngine`` is the single place where cart lines become money. The
checkout preview (``POST /api/orders/quote/``) and order creation both call
it, so the totals a customer is shown are the totals the order is stored
with. Prices always come from the catalog, never from the client.

Shipping is a flat domestic rate that is waived once the subtotal is strictly
above the free-shipping threshold.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Mapping, Optional, Sequence

from django.conf import settings
from rest_framework.exceptions import NotFound, ValidationError

from products.models import Product

logger = logging.getLogger(__name__)

DEFAULT_FREE_SHIPPING_THRESHOLD = 500
DEFAULT_FLAT_SHIPPING_COST = 60


@dataclass
class PricedLine:
    product: Product
    quantity: int
    unit_price: Decimal

    @property
    def product_id(self) -> int:
        return self.product.pk

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Quote:
    items: List[PricedLine] = field(default_factory=list)
    subtotal: Decimal = Decimal('0')
    shipping_cost: Decimal = Decimal('0')
    grand_total: Decimal = Decimal('0')


def shipping_cost_for(subtotal: Decimal) -> Decimal:
    threshold = Decimal(getattr(settings, 'ORDER_FREE_SHIPPING_THRESHOLD', DEFAULT_FREE_SHIPPING_THRESHOLD))
    flat_rate = Decimal(getattr(settings, 'ORDER_FLAT_SHIPPING_COST', DEFAULT_FLAT_SHIPPING_COST))
    return Decimal('0') if subtotal > threshold else flat_rate


class PricingEngine:
    """
    Price a list of ``{"productId", "quantity"}`` lines.

    Pass ``catalog`` (a mapping of product id to ``Product``) to price against
    a fixed snapshot; otherwise the products are loaded in one query. Pricing
    never writes: stock is checked, not decremented.
    """

    def __init__(self, catalog: Optional[Mapping[int, Product]] = None):
        self.catalog = catalog

    def price(self, lines: Sequence[Mapping]) -> Quote:
        if not lines:
            raise ValidationError({'items': 'Order items required.'})

        requested = self._normalise(lines)
        products = self._resolve([product_id for product_id, _ in requested])

        quote = Quote()
        for product_id, quantity in requested:
            product = products[product_id]
            if not product.is_available or product.stock_quantity <= 0:
                raise ValidationError({'items': f"Product not available: {product.name}"})
            quote.items.append(PricedLine(product=product, quantity=quantity, unit_price=product.price))

        quote.subtotal = sum((line.line_total for line in quote.items), Decimal('0'))
        quote.shipping_cost = shipping_cost_for(quote.subtotal)
        quote.grand_total = quote.subtotal + quote.shipping_cost
        return quote

    def _normalise(self, lines):
        requested = []
        seen = set()
        for line in lines:
            product_id = line.get('productId')
            quantity = line.get('quantity')

            # bool is an int subclass; True must not count as quantity 1.
            if isinstance(product_id, bool) or not isinstance(product_id, int) or product_id <= 0:
                raise ValidationError({'items': 'Each item must have a valid productId.'})
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError({'items': 'Each item must have a positive integer quantity.'})
            if product_id in seen:
                raise ValidationError({'items': f"Duplicate productId: {product_id}"})

            seen.add(product_id)
            requested.append((product_id, quantity))
        return requested

    def _resolve(self, product_ids):
        if self.catalog is not None:
            products = {pid: self.catalog[pid] for pid in product_ids if pid in self.catalog}
        else:
            products = Product.objects.in_bulk(product_ids)

        missing = [pid for pid in product_ids if pid not in products]
        if missing:
            logger.info(f"Pricing rejected unknown product ids {missing}")
            raise NotFound(f"Some products not found: {', '.join(str(pid) for pid in missing)}")
        return products
