from django.urls import path

from . import views

urlpatterns = [
    path('orders/<int:order_id>/fulfillment/', views.FulfillmentView.as_view(), name='order-fulfillment'),
]
