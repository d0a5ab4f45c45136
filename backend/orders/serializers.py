from rest_framework import serializers
from backend.core.serializers import LowercaseChoiceField
from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'quantity', 'unit_price',
                  'discount_amount', 'tax_amount', 'total_price']


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'user', 'username', 'customer', 'customer_name',
            'subtotal', 'tax_amount', 'discount_amount', 'total_amount', 'order_date',
            'status', 'payment_status', 'customer_notes', 'items', 'created_at', 'updated_at'
        ]


class OrderItemInputSerializer(serializers.Serializer):
    product = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)


class OrderCreateSerializer(serializers.Serializer):
    """Checkout request; customer and product existence is checked by the service"""
    customer = serializers.IntegerField(min_value=1)
    status = serializers.CharField(required=False, default='pending')
    customer_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = OrderItemInputSerializer(many=True)


class OrderStatusSerializer(serializers.Serializer):
    status = LowercaseChoiceField(choices=Order.STATUS_CHOICES)


class OrderPaymentStatusSerializer(serializers.Serializer):
    payment_status = LowercaseChoiceField(choices=Order.PAYMENT_STATUS_CHOICES)
