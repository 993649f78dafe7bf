"""
Order endpoints for the bookstore API.

- Checkout creates orders (guests included) and previews totals
- Customers list and read only their own orders
- Administrators list every order, patch status/payment fields and delete
"""

from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from authentication.audit import log_audit_event
from authentication.permissions import IsAdminRole, IsOwnerOrAdmin, is_admin

from .pricing import PricingEngine
from .serializers import (
    OrderCreateSerializer,
    OrderLinesSerializer,
    OrderPatchSerializer,
    OrderSerializer,
    QuoteSerializer,
)
from .services import CUSTOMER_FIELDS, OrderStore


class OrderViewSet(viewsets.ModelViewSet):
    """
    ViewSet for orders.

    Access rules:
    - create / quote: anyone (guest checkout), rate limited
    - list: authenticated; non-admins are always scoped to their own orders
    - retrieve: owner or admin; anyone else gets 403, never the body
    - partial_update / destroy: admin only
    """

    serializer_class = OrderSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    lookup_value_regex = r'\d+'
    results_key = 'orders'

    store_class = OrderStore

    def get_store(self):
        return self.store_class()

    def get_permissions(self):
        if self.action in ('create', 'quote'):
            return [AllowAny()]
        if self.action in ('partial_update', 'destroy'):
            return [IsAdminRole()]
        return [IsOwnerOrAdmin()]

    def get_queryset(self):
        user = self.request.user
        requested = self.request.query_params.get('status') if self.action == 'list' else None
        return self.get_store().visible_to(user, is_admin(user), status=requested)

    def get_object(self):
        order = self.get_store().get(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, order)
        return order

    def get_owner_id(self, order):
        return order.user_id

    @method_decorator(ratelimit(key='user_or_ip', rate='5/m', method='POST'))
    @method_decorator(ratelimit(key='ip', rate='10/m', method='POST'))
    def create(self, request, *args, **kwargs):
        """
        Place an order from cart lines.

        Totals are recomputed from the catalog; any unknown, unavailable or
        out-of-stock product fails the whole order and nothing is stored.
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        quote = PricingEngine().price(data['items'])
        store = self.get_store()
        order = store.create(
            customer={name: data.get(name) for name in CUSTOMER_FIELDS},
            quote=quote,
            payment_method=data['payment_method'],
            transaction_id=data.get('transaction_id'),
            image=data.get('image'),
            user=request.user if request.user.is_authenticated else None,
        )

        log_audit_event(
            request, 'CREATE', 'ORDER', order.pk, 'SUCCESS',
            {'grand_total': str(order.grand_total), 'payment_status': order.payment_status},
        )
        return Response(OrderSerializer(store.get(order.pk)).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def quote(self, request):
        """Checkout preview priced by the same engine as order creation."""
        serializer = OrderLinesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quote = PricingEngine().price(serializer.validated_data['items'])
        return Response(QuoteSerializer(quote).data)

    @method_decorator(ratelimit(key='user', rate='20/m', method='PATCH'))
    def partial_update(self, request, *args, **kwargs):
        serializer = OrderPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self.get_store().patch(self.kwargs[self.lookup_field], **serializer.validated_data)

        log_audit_event(
            request, 'UPDATE', 'ORDER', order.pk, 'SUCCESS',
            {'fields': sorted(serializer.validated_data)},
        )
        return Response(OrderSerializer(order).data)

    def destroy(self, request, *args, **kwargs):
        order_id = self.kwargs[self.lookup_field]
        self.get_store().delete(order_id)
        log_audit_event(request, 'DELETE', 'ORDER', order_id, 'SUCCESS')
        return Response(status=status.HTTP_204_NO_CONTENT)
