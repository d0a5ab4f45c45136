from decimal import Decimal
from rest_framework import serializers
from backend.core.serializers import LowercaseChoiceField
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            'id', 'order', 'order_number', 'amount', 'payment_method', 'status',
            'transaction_id', 'notes', 'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]


class PaymentCreateSerializer(serializers.Serializer):
    order = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    payment_method = LowercaseChoiceField(choices=Payment.PAYMENT_METHOD_CHOICES)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)


class PaymentUpdateSerializer(serializers.Serializer):
    """Every field is optional; only supplied fields are applied"""
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    payment_method = LowercaseChoiceField(choices=Payment.PAYMENT_METHOD_CHOICES, required=False)
    status = LowercaseChoiceField(choices=Payment.STATUS_CHOICES, required=False)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)


class PaymentRefundSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
