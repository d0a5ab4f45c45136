from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'price', 'cost_price', 'quantity_in_stock', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'sku', 'barcode']
    ordering = ['name']
    readonly_fields = ['quantity_in_stock', 'created_at', 'updated_at']
