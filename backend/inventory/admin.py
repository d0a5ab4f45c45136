from django.contrib import admin
from .models import StockAdjustment


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(admin.ModelAdmin):
    list_display = ['product', 'adjustment_type', 'quantity', 'quantity_after', 'reason', 'reference', 'created_by', 'created_at']
    list_filter = ['adjustment_type', 'reason', 'created_at']
    search_fields = ['product__name', 'product__sku', 'reference', 'notes']
    ordering = ['-created_at']
    readonly_fields = ['product', 'adjustment_type', 'quantity', 'quantity_after', 'reason', 'reference', 'created_by', 'created_at']
