from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['order', 'amount', 'payment_method', 'status', 'transaction_id', 'is_deleted', 'created_by', 'created_at']
    list_filter = ['payment_method', 'status', 'is_deleted', 'created_at']
    search_fields = ['order__order_number', 'transaction_id', 'notes']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'deleted_at']

    def get_queryset(self, request):
        return Payment.all_objects.select_related('order', 'created_by')
