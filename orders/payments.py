"""
Payment status derivation.

An order's payment status is derived once, at creation, from the payment
method the customer picked, and is afterwards an administrator-owned field.

Known payment channels are listed in ``PAYMENT_METHOD_DEFAULTS``. Anything
not listed falls back to ``PAYMENT_STATUS_FALLBACK`` and the fallback is
logged, so a newly added channel that silently defaults to PAID shows up in
the logs instead of going unnoticed.
"""

import logging

from django.conf import settings
from rest_framework.exceptions import ValidationError

from .models import PaymentStatus

logger = logging.getLogger(__name__)

CASH_ON_DELIVERY = 'CashOnDelivery'

DEFAULT_REGISTRY = {
    CASH_ON_DELIVERY: PaymentStatus.UNPAID,
}


class PaymentStatusResolver:

    def __init__(self, registry=None, fallback=None):
        if registry is None:
            registry = getattr(settings, 'PAYMENT_METHOD_DEFAULTS', DEFAULT_REGISTRY)
        if fallback is None:
            fallback = getattr(settings, 'PAYMENT_STATUS_FALLBACK', PaymentStatus.PAID)

        self.registry = {method: self._coerce(status) for method, status in registry.items()}
        self.fallback = self._coerce(fallback)

    @staticmethod
    def _coerce(value):
        if value not in PaymentStatus.values:
            raise ValueError(f"Unknown payment status '{value}' in payment method registry")
        return PaymentStatus(value)

    def resolve_initial(self, payment_method: str) -> PaymentStatus:
        if not payment_method:
            raise ValidationError({'payment_method': 'Payment method is required.'})

        try:
            return self.registry[payment_method]
        except KeyError:
            logger.warning(
                f"Payment method '{payment_method}' is not registered; "
                f"defaulting payment status to {self.fallback.value}"
            )
            return self.fallback

    def override(self, current: str, requested: str) -> PaymentStatus:
        """
        Administrator override. Every move is allowed, PAID -> UNPAID included
        (refund bookkeeping).
        """
        if requested not in PaymentStatus.values:
            raise ValidationError(
                {'paymentStatus': f"Invalid payment status '{requested}'. Valid values: {', '.join(PaymentStatus.values)}"}
            )
        if current != requested:
            logger.info(f"Payment status overridden from {current} to {requested}")
        return PaymentStatus(requested)
