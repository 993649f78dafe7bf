from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'price', 'stock_quantity', 'is_available', 'created_at']
    list_filter = ['is_available']
    search_fields = ['name', 'sku']
    ordering = ['-created_at']
