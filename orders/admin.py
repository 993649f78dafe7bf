from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ['product', 'quantity', 'price']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'phone_number', 'status', 'payment_status', 'payment_method', 'grand_total', 'created_at']
    list_filter = ['status', 'payment_status', 'payment_method', 'created_at']
    search_fields = ['id', 'name', 'email', 'phone_number', 'transaction_id']
    readonly_fields = ['total', 'shipping_cost', 'grand_total', 'created_at', 'updated_at']
    ordering = ['-created_at']
    inlines = [OrderItemInline]
