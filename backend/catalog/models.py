from django.db import models
from decimal import Decimal


class Product(models.Model):
    """
    Product master.

    quantity_in_stock is a whole-unit counter owned by the inventory app:
    it only moves through backend.inventory.services.adjust_stock.
    """
    name = models.CharField(max_length=200, db_index=True)
    sku = models.CharField(max_length=100, unique=True, db_index=True)
    barcode = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    quantity_in_stock = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    class Meta:
        db_table = 'products'
        ordering = ['name']
