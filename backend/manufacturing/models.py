from django.db import models
from decimal import Decimal, ROUND_HALF_UP
from backend.catalog.models import Product


class Recipe(models.Model):
    """Bill of materials for producing `output_quantity` of a product"""
    name = models.CharField(max_length=200)
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='recipes')
    output_quantity = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('1.0000'))
    yield_factor = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('1.0000'))
    labor_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    overhead_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    completed_quantity = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('0.0000'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def estimated_cost(self):
        """Material cost per unit of yield (4 dp, half-up) plus labor and overhead"""
        items_cost = sum(
            (item.quantity * item.product.cost_price for item in self.items.all()),
            Decimal('0'),
        )
        yield_factor = self.yield_factor if self.yield_factor else Decimal('1')
        material_cost = (items_cost / yield_factor).quantize(Decimal('0.0001'), rounding=ROUND_HALF_UP)
        return material_cost + self.labor_cost + self.overhead_cost

    def completion_percentage(self, total_orders):
        """completed_quantity as a percentage of output_quantity across all production orders"""
        target = self.output_quantity * total_orders
        if not target:
            return Decimal('0.00')
        return (self.completed_quantity * 100 / target).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    class Meta:
        db_table = 'recipes'
        ordering = ['name', 'id']


class RecipeItem(models.Model):
    recipe = models.ForeignKey(Recipe, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='recipe_items')
    quantity = models.DecimalField(max_digits=18, decimal_places=4)
    uom = models.CharField(max_length=20, default='kg')
    loss_percent = models.DecimalField(max_digits=7, decimal_places=4, default=Decimal('0.0000'))

    def __str__(self):
        return f"{self.product.name} {self.quantity} {self.uom}"

    class Meta:
        db_table = 'recipe_items'
        ordering = ['id']


class ProductionOrder(models.Model):
    """
    A manufacturing work unit. Status may be set to any value at any time;
    no transition order is enforced.
    """
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('released', 'Released'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('closed', 'Closed'),
    ]

    recipe = models.ForeignKey(Recipe, on_delete=models.PROTECT, related_name='production_orders')
    work_center = models.CharField(max_length=100)
    planned_quantity = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('0.0000'))
    produced_quantity = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('0.0000'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='production_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"PO-{self.id} ({self.recipe.name})"

    class Meta:
        db_table = 'production_orders'
        ordering = ['-created_at', '-id']


class MaterialIssue(models.Model):
    """Material consumed by a production order (append-only)"""
    production_order = models.ForeignKey(ProductionOrder, on_delete=models.CASCADE, related_name='material_issues')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='material_issues')
    quantity = models.DecimalField(max_digits=18, decimal_places=4)
    batch_number = models.CharField(max_length=64, blank=True, null=True)
    expiry_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'material_issues'
        ordering = ['id']


class ProductionOutput(models.Model):
    """Output received from a production order (append-only)"""
    production_order = models.ForeignKey(ProductionOrder, on_delete=models.CASCADE, related_name='outputs')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='production_outputs')
    quantity = models.DecimalField(max_digits=18, decimal_places=4)
    batch_number = models.CharField(max_length=64, blank=True, null=True)
    expiry_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'production_outputs'
        ordering = ['id']


class Batch(models.Model):
    """Traceability record for a produced lot"""
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='batches')
    batch_number = models.CharField(max_length=64, db_index=True)
    production_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    production_order = models.ForeignKey(ProductionOrder, on_delete=models.SET_NULL, null=True, blank=True, related_name='batches')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.batch_number

    class Meta:
        db_table = 'batches'
        verbose_name_plural = 'batches'
        ordering = ['-created_at', '-id']
