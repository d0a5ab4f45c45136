from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'is_active', 'is_deleted', 'created_at']
    list_filter = ['is_active', 'is_deleted', 'created_at']
    search_fields = ['name', 'phone', 'email']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at', 'deleted_at']

    def get_queryset(self, request):
        return Customer.all_objects.all()
