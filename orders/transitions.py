"""
Status transition tables for orders and shipments.

Every status write goes through ``TransitionTable.check`` so that rules can be
tightened in one place. The tables are currently fully permissive: an
administrator may move an order or a shipment from any status to any other
(DELIVERED -> PENDING included).
"""

from rest_framework.exceptions import ValidationError

from .models import OrderStatus


class TransitionTable:

    def __init__(self, label, choices, allowed=None):
        self.label = label
        self.values = list(choices.values)
        if allowed is None:
            allowed = {status: set(self.values) for status in self.values}
        self.allowed = allowed

    def validate_value(self, value):
        if value not in self.values:
            raise ValidationError(
                {'status': f"Invalid {self.label} status '{value}'. Valid values: {', '.join(self.values)}"}
            )
        return value

    def check(self, current, requested):
        """Return ``requested`` if the move is legal, else raise ValidationError."""
        self.validate_value(requested)
        if current == requested:
            return requested
        if requested not in self.allowed.get(current, ()):
            raise ValidationError(
                {'status': f"Cannot move {self.label} from {current} to {requested}."}
            )
        return requested


ORDER_TRANSITIONS = TransitionTable('order', OrderStatus)
