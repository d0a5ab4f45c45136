from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['total_price']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer', 'user', 'status', 'payment_status', 'total_amount', 'order_date']
    list_filter = ['status', 'payment_status', 'order_date']
    search_fields = ['order_number', 'customer__name']
    ordering = ['-order_date']
    inlines = [OrderItemInline]
    readonly_fields = ['order_number', 'subtotal', 'total_amount', 'created_at', 'updated_at']
