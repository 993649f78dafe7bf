import django_filters

from .models import Shipment, ShipmentStatus


class ShipmentFilter(django_filters.FilterSet):
    orderId = django_filters.NumberFilter(field_name='order_id')
    status = django_filters.ChoiceFilter(choices=ShipmentStatus.choices)

    class Meta:
        model = Shipment
        fields = ['orderId', 'status']
