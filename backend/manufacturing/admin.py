from django.contrib import admin
from .models import Recipe, RecipeItem, ProductionOrder, MaterialIssue, ProductionOutput, Batch


class RecipeItemInline(admin.TabularInline):
    model = RecipeItem
    extra = 1


@admin.register(Recipe)
class RecipeAdmin(admin.ModelAdmin):
    list_display = ['name', 'product', 'output_quantity', 'yield_factor', 'labor_cost', 'overhead_cost', 'completed_quantity']
    search_fields = ['name', 'product__name']
    ordering = ['name']
    inlines = [RecipeItemInline]
    readonly_fields = ['created_at', 'updated_at']


class MaterialIssueInline(admin.TabularInline):
    model = MaterialIssue
    extra = 0
    readonly_fields = ['product', 'quantity', 'batch_number', 'expiry_date', 'created_at']


class ProductionOutputInline(admin.TabularInline):
    model = ProductionOutput
    extra = 0
    readonly_fields = ['product', 'quantity', 'batch_number', 'expiry_date', 'created_at']


@admin.register(ProductionOrder)
class ProductionOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'recipe', 'work_center', 'status', 'planned_quantity', 'produced_quantity', 'created_at']
    list_filter = ['status', 'work_center', 'created_at']
    search_fields = ['recipe__name', 'work_center']
    ordering = ['-created_at']
    inlines = [MaterialIssueInline, ProductionOutputInline]
    readonly_fields = ['produced_quantity', 'created_at', 'updated_at']


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ['batch_number', 'product', 'production_date', 'expiry_date', 'production_order', 'created_at']
    list_filter = ['production_date', 'expiry_date']
    search_fields = ['batch_number', 'product__name']
    ordering = ['-created_at']
