from django.contrib import admin

from .models import Shipment


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'courier', 'tracking_number', 'status', 'shipped_at', 'delivered_at']
    list_filter = ['status', 'courier']
    search_fields = ['order__id', 'tracking_number', 'courier']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['order']
    ordering = ['-created_at']
