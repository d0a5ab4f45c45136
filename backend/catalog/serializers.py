from rest_framework import serializers
from .models import Product
from .utils import generate_unique_sku


class ProductSerializer(serializers.ModelSerializer):
    # Stock is adjusted through the inventory endpoints only
    quantity_in_stock = serializers.IntegerField(read_only=True)
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'barcode', 'description', 'price', 'cost_price',
            'quantity_in_stock', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate_cost_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Cost price cannot be negative')
        return value

    def validate_sku(self, value):
        value = (value or '').strip()
        if value:
            queryset = Product.objects.filter(sku=value)
            if self.instance:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError('A product with this SKU already exists')
        return value

    def create(self, validated_data):
        if not validated_data.get('sku'):
            validated_data['sku'] = generate_unique_sku(validated_data.get('name'))
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if 'sku' in validated_data and not validated_data['sku']:
            validated_data.pop('sku')
        return super().update(instance, validated_data)
