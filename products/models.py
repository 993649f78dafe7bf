"""
Catalog models for the bookstore.

Only the parts of the catalog the order lifecycle reads are modelled here:
price, stock and availability. Authors, publishers and categories are managed
elsewhere.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    A book offered in the storefront.

    Prices are whole-unit Decimals; orders snapshot the price at creation so
    later edits here never change past orders.
    """

    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text=_("Book title"),
    )
    description = models.TextField(blank=True)
    sku = models.CharField(
        max_length=100,
        unique=True,
        help_text=_("Stock Keeping Unit - unique product identifier"),
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text=_("Current selling price"),
    )
    original_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("List price before discount, for display only"),
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(
        default=True,
        help_text=_("If False, the book is listed but cannot be ordered"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_available', 'created_at'], name='product_avail_created_idx'),
        ]
        verbose_name = _("Product")
        verbose_name_plural = _("Products")

    def __str__(self):
        return f"{self.name} (SKU: {self.sku})"

    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    def is_orderable(self) -> bool:
        return self.is_available and self.is_in_stock()

    @classmethod
    def reserve_stock(cls, product_id: int, quantity: int) -> bool:
        """
        Atomically take ``quantity`` units from stock.

        A single conditional UPDATE, so two concurrent orders can never both
        take the last unit. Returns False when stock is insufficient; callers
        run this inside the transaction that persists the order.
        """
        if quantity <= 0:
            raise ValueError("Quantity must be positive")

        updated = cls.objects.filter(
            pk=product_id,
            stock_quantity__gte=quantity,
        ).update(stock_quantity=F('stock_quantity') - quantity)
        return updated == 1
