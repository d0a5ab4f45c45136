from django.db import models
from backend.catalog.models import Product


class StockAdjustment(models.Model):
    """Append-only record of every change to a product's stock counter"""
    ADJUSTMENT_TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
    ]

    REASON_CHOICES = [
        ('damaged', 'Damaged'),
        ('expired', 'Expired'),
        ('found', 'Found'),
        ('theft', 'Theft'),
        ('correction', 'Correction'),
        ('material_issue', 'Material Issue'),
        ('production_output', 'Production Output'),
        ('other', 'Other'),
    ]

    MANUAL_REASONS = ['damaged', 'expired', 'found', 'theft', 'correction', 'other']

    adjustment_type = models.CharField(max_length=10, choices=ADJUSTMENT_TYPE_CHOICES)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='adjustments')
    quantity = models.PositiveIntegerField()
    quantity_after = models.IntegerField()
    reason = models.CharField(max_length=50, choices=REASON_CHOICES)
    reference = models.CharField(max_length=100, blank=True, db_index=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_adjustments')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        sign = '+' if self.adjustment_type == 'in' else '-'
        return f"{self.product.name} {sign}{self.quantity}"

    @property
    def delta(self):
        return self.quantity if self.adjustment_type == 'in' else -self.quantity

    class Meta:
        db_table = 'stock_adjustments'
        ordering = ['-created_at', '-id']
