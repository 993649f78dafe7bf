"""Object builders shared by the order, shipment and fulfillment tests."""

from decimal import Decimal
from itertools import count

from authentication.models import Role, User, UserRole
from authentication.permissions import ADMIN_ROLE
from orders.models import Order, OrderItem, OrderStatus, PaymentStatus
from products.models import Product

_sequence = count(1)


def make_product(price='100.00', stock_quantity=10, is_available=True, name=None):
    n = next(_sequence)
    return Product.objects.create(
        name=name or f'Book {n}',
        sku=f'SKU-{n:05d}',
        price=Decimal(price),
        stock_quantity=stock_quantity,
        is_available=is_available,
    )


def make_user(username=None):
    username = username or f'customer{next(_sequence)}'
    return User.objects.create_user(
        username=username,
        email=f'{username}@example.com',
        password='Str0ng-Passw0rd!',
    )


def make_admin(username=None):
    user = make_user(username or f'admin{next(_sequence)}')
    role, _created = Role.objects.get_or_create(name=ADMIN_ROLE, defaults={'display_name': 'Administrator'})
    UserRole.objects.create(user=user, role=role)
    return user


def make_order(user=None, status=OrderStatus.PENDING, payment_method='CashOnDelivery', product=None, quantity=1):
    product = product or make_product()
    total = product.price * quantity
    order = Order.objects.create(
        user=user,
        name='Rahim Uddin',
        email='rahim@example.com',
        phone_number='01700000000',
        country='Bangladesh',
        district='Dhaka',
        area='Mirpur',
        address_details='House 1, Road 2',
        total=total,
        shipping_cost=Decimal('60.00'),
        payment_method=payment_method,
        payment_status=PaymentStatus.UNPAID if payment_method == 'CashOnDelivery' else PaymentStatus.PAID,
        status=status,
    )
    OrderItem.objects.create(order=order, product=product, quantity=quantity, price=product.price)
    return order


def checkout_payload(*lines, payment_method='CashOnDelivery', **overrides):
    payload = {
        'name': 'Rahim Uddin',
        'email': 'rahim@example.com',
        'phone_number': '01700000000',
        'country': 'Bangladesh',
        'district': 'Dhaka',
        'area': 'Mirpur',
        'address_details': 'House 1, Road 2',
        'payment_method': payment_method,
        'items': [{'productId': product_id, 'quantity': quantity} for product_id, quantity in lines],
    }
    payload.update(overrides)
    return payload
