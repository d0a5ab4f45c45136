from django.db import models
from django.utils import timezone
from decimal import Decimal
from backend.core.models import User
from backend.catalog.models import Product
from backend.parties.models import Customer


class Order(models.Model):
    """
    Customer order with derived monetary totals.

    Status changes are unrestricted: any status may be set from any other
    except through cancel_order, which refuses cancelled and completed orders.
    """
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('refunded', 'Refunded'),
    ]

    PAYMENT_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('authorized', 'Authorized'),
        ('paid', 'Paid'),
        ('refunded', 'Refunded'),
        ('partially_refunded', 'Partially Refunded'),
        ('voided', 'Voided'),
        ('failed', 'Failed'),
    ]

    order_number = models.CharField(max_length=50, unique=True)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='orders')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    order_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='pending', db_index=True)
    customer_notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    def calculate_totals(self, items=None):
        """
        Derive subtotal and total from the line items.

        Item totals must already be final (OrderItem.calculate_total).
        Pass unsaved items explicitly; otherwise the persisted items are used.
        """
        if items is None:
            items = self.items.all()
        self.subtotal = sum((item.total_price for item in items), Decimal('0.00'))
        self.total_amount = self.subtotal + self.tax_amount - self.discount_amount
        return self.total_amount

    class Meta:
        db_table = 'orders'
        ordering = ['-order_date', '-id']
        indexes = [
            models.Index(fields=['-order_date'], name='idx_order_date'),
            models.Index(fields=['status', 'payment_status'], name='idx_order_status_payment'),
        ]


class OrderItem(models.Model):
    """Order line; line order is insertion order"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    def __str__(self):
        return f"{self.product.name} x {self.quantity}"

    def calculate_total(self):
        self.total_price = self.unit_price * self.quantity - self.discount_amount + self.tax_amount
        return self.total_price

    class Meta:
        db_table = 'order_items'
        ordering = ['id']
