from rest_framework import serializers
from backend.catalog.models import Product
from .models import StockAdjustment


class StockAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockAdjustment
        fields = ['id', 'adjustment_type', 'product', 'product_name', 'quantity', 'quantity_after',
                  'reason', 'reference', 'notes', 'created_by', 'created_by_username', 'created_at']


class StockAdjustmentCreateSerializer(serializers.Serializer):
    """Input for a manual stock adjustment"""
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    adjustment_type = serializers.ChoiceField(choices=StockAdjustment.ADJUSTMENT_TYPE_CHOICES)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(choices=StockAdjustment.MANUAL_REASONS, default='correction')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def get_delta(self):
        data = self.validated_data
        return data['quantity'] if data['adjustment_type'] == 'in' else -data['quantity']
