from django.db import models
from backend.core.models import SoftDeleteModel


class Customer(SoftDeleteModel):
    """Customers; deleting only flags the row"""
    name = models.CharField(max_length=200, db_index=True)
    phone = models.CharField(max_length=20, blank=True, null=True, db_index=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']
