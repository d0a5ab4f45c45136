"""
Manufacturing workflows: production orders, material issue and output receipt.

Issue and receipt each run in one transaction with the production order and
every touched product locked, so stock and order quantities move together.
"""
import logging
from decimal import Decimal

from django.db import transaction

from backend.core.exceptions import InvalidArgument, NotFound
from backend.core.utils import create_audit_log, normalize_choice, parse_date_bound
from backend.inventory.services import (
    adjust_stock, check_stock_available, lock_products, net_deltas, to_stock_units
)
from .models import Batch, MaterialIssue, ProductionOrder, ProductionOutput, Recipe, RecipeItem

logger = logging.getLogger(__name__)


def get_recipe(recipe_id):
    recipe = Recipe.objects.select_related('product').prefetch_related('items__product').filter(pk=recipe_id).first()
    if recipe is None:
        raise NotFound(f'Recipe not found with id: {recipe_id}')
    return recipe


def duplicate_recipe(recipe_id):
    """Copy a recipe and its items under the name 'Copy of <name>'"""
    source = get_recipe(recipe_id)
    with transaction.atomic():
        copy = Recipe.objects.create(
            name=f'Copy of {source.name}'[:200],
            product=source.product,
            output_quantity=source.output_quantity,
            yield_factor=source.yield_factor,
            labor_cost=source.labor_cost,
            overhead_cost=source.overhead_cost,
        )
        RecipeItem.objects.bulk_create([
            RecipeItem(
                recipe=copy,
                product=item.product,
                quantity=item.quantity,
                uom=item.uom,
                loss_percent=item.loss_percent,
            )
            for item in source.items.all()
        ])
    return get_recipe(copy.id)


def add_completed_quantity(recipe_id, amount):
    amount = Decimal(str(amount))
    if amount <= 0:
        raise InvalidArgument('Amount must be greater than zero')
    with transaction.atomic():
        recipe = Recipe.objects.select_for_update().filter(pk=recipe_id).first()
        if recipe is None:
            raise NotFound(f'Recipe not found with id: {recipe_id}')
        recipe.completed_quantity += amount
        recipe.save(update_fields=['completed_quantity', 'updated_at'])
    return get_recipe(recipe_id)


def get_production_order(order_id, lock=False):
    queryset = ProductionOrder.objects.select_for_update() if lock else ProductionOrder.objects.select_related('recipe')
    order = queryset.filter(pk=order_id).first()
    if order is None:
        raise NotFound(f'Production order not found with id: {order_id}')
    return order


def create_production_order(recipe_id, work_center, planned_quantity, user=None):
    """New production orders start as drafts with nothing produced"""
    recipe = Recipe.objects.filter(pk=recipe_id).first()
    if recipe is None:
        raise NotFound(f'Recipe not found with id: {recipe_id}')
    order = ProductionOrder.objects.create(
        recipe=recipe,
        work_center=work_center,
        planned_quantity=planned_quantity,
        produced_quantity=Decimal('0'),
        status='draft',
        created_by=user,
    )
    logger.info(f"Production order {order.id} created for recipe {recipe.id}")
    return order


def change_order_status(order_id, status, user=None):
    """Set a production order's status; any status may follow any other"""
    status = normalize_choice(status, ProductionOrder.STATUS_CHOICES, 'status')
    with transaction.atomic():
        order = get_production_order(order_id, lock=True)
        old_status = order.status
        order.status = status
        order.save(update_fields=['status', 'updated_at'])

    create_audit_log(
        action='production_status',
        model_name='ProductionOrder',
        object_id=order.id,
        user=user,
        object_reference=f'PO-{order.id}',
        changes={'status': {'old': old_status, 'new': order.status}},
    )
    return order


def search_production_orders(status=None, start_date=None, end_date=None):
    """Production orders filtered by status and created_at range (inclusive); all optional"""
    queryset = ProductionOrder.objects.select_related('recipe')
    if status:
        queryset = queryset.filter(status=normalize_choice(status, ProductionOrder.STATUS_CHOICES, 'status'))
    if start_date:
        queryset = queryset.filter(created_at__gte=parse_date_bound(start_date, label='start_date'))
    if end_date:
        queryset = queryset.filter(created_at__lte=parse_date_bound(end_date, end_of_day=True, label='end_date'))
    return queryset.order_by('-created_at', '-id')


def _validate_items(items):
    if not items:
        raise InvalidArgument('At least one item is required')
    for item in items:
        if Decimal(str(item['quantity'])) < 0:
            raise InvalidArgument('Item quantity cannot be negative')


def issue_materials(order_id, items, user=None):
    """
    Record materials consumed by a production order and take them out of stock.

    Each item is {product, quantity, batch_number?, expiry_date?}. Stock moves
    by the quantity truncated to whole units; zero-unit items write no stock.
    """
    _validate_items(items)

    with transaction.atomic():
        order = get_production_order(order_id, lock=True)
        products = lock_products(item['product'] for item in items)
        check_stock_available(
            products,
            net_deltas((item['product'], -to_stock_units(item['quantity'])) for item in items),
        )

        issues = MaterialIssue.objects.bulk_create([
            MaterialIssue(
                production_order=order,
                product=products[int(item['product'])],
                quantity=item['quantity'],
                batch_number=item.get('batch_number') or None,
                expiry_date=item.get('expiry_date'),
            )
            for item in items
        ])

        for item in items:
            units = to_stock_units(item['quantity'])
            if units != 0:
                adjust_stock(item['product'], -units, user=user, reason='material_issue', reference=f'PO-{order.id}')

    logger.info(f"Issued {len(issues)} material line(s) to production order {order.id}")
    create_audit_log(
        action='material_issue',
        model_name='ProductionOrder',
        object_id=order.id,
        user=user,
        object_reference=f'PO-{order.id}',
        changes={'items': [{'product': int(item['product']), 'quantity': str(item['quantity'])} for item in items]},
    )
    return get_production_order(order.id)


def receive_output(order_id, items, user=None):
    """
    Record output of a production order.

    In order: output rows, produced_quantity, a Batch per item with a
    non-blank batch number, then stock increments. All in one transaction.
    """
    _validate_items(items)

    with transaction.atomic():
        order = get_production_order(order_id, lock=True)
        products = lock_products(item['product'] for item in items)

        outputs = ProductionOutput.objects.bulk_create([
            ProductionOutput(
                production_order=order,
                product=products[int(item['product'])],
                quantity=item['quantity'],
                batch_number=item.get('batch_number') or None,
                expiry_date=item.get('expiry_date'),
            )
            for item in items
        ])

        received = sum((Decimal(str(item['quantity'])) for item in items), Decimal('0'))
        order.produced_quantity += received
        order.save(update_fields=['produced_quantity', 'updated_at'])

        batches = Batch.objects.bulk_create([
            Batch(
                product=products[int(item['product'])],
                batch_number=item['batch_number'].strip(),
                production_date=item.get('production_date'),
                expiry_date=item.get('expiry_date'),
                production_order=order,
            )
            for item in items
            if (item.get('batch_number') or '').strip()
        ])

        for item in items:
            units = to_stock_units(item['quantity'])
            if units != 0:
                adjust_stock(item['product'], units, user=user, reason='production_output', reference=f'PO-{order.id}')

    logger.info(f"Received {len(outputs)} output line(s) ({received}) and {len(batches)} batch(es) for production order {order.id}")
    create_audit_log(
        action='production_output',
        model_name='ProductionOrder',
        object_id=order.id,
        user=user,
        object_reference=f'PO-{order.id}',
        changes={
            'received': str(received),
            'produced_quantity': str(order.produced_quantity),
            'batches': [batch.batch_number for batch in batches],
        }
    )
    return get_production_order(order.id)
