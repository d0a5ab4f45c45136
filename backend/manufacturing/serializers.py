from decimal import Decimal
from django.db import transaction
from rest_framework import serializers
from .models import Recipe, RecipeItem, ProductionOrder, MaterialIssue, ProductionOutput, Batch


class RecipeItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=Decimal('0.0001'))
    loss_percent = serializers.DecimalField(max_digits=7, decimal_places=4, min_value=0, max_value=100, required=False)

    class Meta:
        model = RecipeItem
        fields = ['id', 'product', 'product_name', 'quantity', 'uom', 'loss_percent']


class RecipeSerializer(serializers.ModelSerializer):
    items = RecipeItemSerializer(many=True, required=False)
    product_name = serializers.CharField(source='product.name', read_only=True)
    output_quantity = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=Decimal('0.0001'))
    yield_factor = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0, required=False)
    labor_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    overhead_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    estimated_cost = serializers.SerializerMethodField()
    total_orders = serializers.SerializerMethodField()
    completed_orders = serializers.SerializerMethodField()
    completion_percentage = serializers.SerializerMethodField()

    class Meta:
        model = Recipe
        fields = [
            'id', 'name', 'product', 'product_name', 'output_quantity', 'yield_factor',
            'labor_cost', 'overhead_cost', 'completed_quantity', 'estimated_cost',
            'total_orders', 'completed_orders', 'completion_percentage',
            'items', 'created_at', 'updated_at'
        ]
        read_only_fields = ['completed_quantity', 'created_at', 'updated_at']

    def get_estimated_cost(self, obj):
        return str(obj.estimated_cost())

    def get_total_orders(self, obj):
        return obj.production_orders.count()

    def get_completed_orders(self, obj):
        return obj.production_orders.filter(status='completed').count()

    def get_completion_percentage(self, obj):
        return str(obj.completion_percentage(self.get_total_orders(obj)))

    def create(self, validated_data):
        items_data = validated_data.pop('items', [])
        with transaction.atomic():
            recipe = Recipe.objects.create(**validated_data)
            RecipeItem.objects.bulk_create([RecipeItem(recipe=recipe, **item) for item in items_data])
        return recipe

    def update(self, instance, validated_data):
        """Update fields; when items are supplied they replace the existing ones"""
        items_data = validated_data.pop('items', None)
        with transaction.atomic():
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            instance.save()
            if items_data is not None:
                instance.items.all().delete()
                RecipeItem.objects.bulk_create([RecipeItem(recipe=instance, **item) for item in items_data])
        return instance


class ProductionOrderSerializer(serializers.ModelSerializer):
    recipe_name = serializers.CharField(source='recipe.name', read_only=True)

    class Meta:
        model = ProductionOrder
        fields = ['id', 'status', 'recipe', 'recipe_name', 'work_center', 'planned_quantity',
                  'produced_quantity', 'created_by', 'created_at', 'updated_at']


class ProductionOrderCreateSerializer(serializers.Serializer):
    recipe = serializers.IntegerField(min_value=1)
    work_center = serializers.CharField(max_length=100)
    planned_quantity = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)


class ProductionOrderStatusSerializer(serializers.Serializer):
    # Validated case-insensitively by the service
    status = serializers.CharField()


class MaterialIssueSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = MaterialIssue
        fields = ['id', 'product', 'product_name', 'quantity', 'batch_number', 'expiry_date', 'created_at']


class ProductionOutputSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = ProductionOutput
        fields = ['id', 'product', 'product_name', 'quantity', 'batch_number', 'expiry_date', 'created_at']


class BatchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Batch
        fields = ['id', 'product', 'batch_number', 'production_date', 'expiry_date', 'production_order', 'created_at']


class ProductionOrderDetailSerializer(ProductionOrderSerializer):
    material_issues = MaterialIssueSerializer(many=True, read_only=True)
    outputs = ProductionOutputSerializer(many=True, read_only=True)
    batches = BatchSerializer(many=True, read_only=True)

    class Meta(ProductionOrderSerializer.Meta):
        fields = ProductionOrderSerializer.Meta.fields + ['material_issues', 'outputs', 'batches']


class MovementItemSerializer(serializers.Serializer):
    """One line of a material issue or output receipt"""
    product = serializers.IntegerField(min_value=1)
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)
    batch_number = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)


class OutputItemSerializer(MovementItemSerializer):
    production_date = serializers.DateField(required=False, allow_null=True)


class IssueMaterialsSerializer(serializers.Serializer):
    items = MovementItemSerializer(many=True, allow_empty=False)


class ReceiveOutputSerializer(serializers.Serializer):
    items = OutputItemSerializer(many=True, allow_empty=False)


class CompletedQuantitySerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=18, decimal_places=4)
