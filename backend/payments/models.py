from django.db import models
from decimal import Decimal
from backend.core.models import SoftDeleteModel, User
from backend.orders.models import Order


class Payment(SoftDeleteModel):
    """
    One money movement against an order.

    Positive amounts are charges; refunds are separate rows with a negated
    amount. Existing payments are never rewritten by a refund.
    """
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('credit_card', 'Credit Card'),
        ('debit_card', 'Debit Card'),
        ('bank_transfer', 'Bank Transfer'),
        ('mobile_payment', 'Mobile Payment'),
        ('digital_wallet', 'Digital Wallet'),
        ('other', 'Other'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('refunded', 'Refunded'),
        ('partially_refunded', 'Partially Refunded'),
        ('cancelled', 'Cancelled'),
    ]

    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    transaction_id = models.CharField(max_length=100, blank=True, null=True)
    notes = models.CharField(max_length=500, blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_payment_method_display()} {self.amount} for {self.order.order_number}"

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['order', 'is_deleted'], name='idx_payment_order_deleted'),
            models.Index(fields=['-created_at'], name='idx_payment_created'),
        ]
