"""
URL configuration for bookstore_project.

This module defines URL patterns for the bookstore API including:
- Product, Order and Shipment ViewSet routes
- Order fulfillment endpoint
- Authentication and JWT token endpoints
- Admin interface
"""

from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from orders.views import OrderViewSet
from products.views import ProductViewSet
from shipments.views import ShipmentViewSet

router = DefaultRouter()
router.register(r'products', ProductViewSet, basename='product')
router.register(r'orders', OrderViewSet, basename='order')
router.register(r'shipments', ShipmentViewSet, basename='shipment')

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/', include('fulfillment.urls')),
    path('api/', include('authentication.urls')),
    path('api/', include(router.urls)),
]
