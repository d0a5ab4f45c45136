"""
Stock adjuster: the only code path that changes Product.quantity_in_stock.

Callers that touch several products lock them up front with lock_products()
and validate with check_stock_available() before their first write.
"""
import logging
from collections import defaultdict
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import F

from backend.catalog.models import Product
from backend.core.exceptions import InvalidArgument, NotFound
from .models import StockAdjustment

logger = logging.getLogger(__name__)


def to_stock_units(quantity):
    """Truncate a (possibly fractional) quantity toward zero to whole stock units"""
    return int(Decimal(str(quantity)))


def lock_products(product_ids):
    """
    Lock the given products for update in ascending id order and return {id: Product}.
    Must be called inside a transaction.
    """
    ids = sorted({int(pid) for pid in product_ids})
    products = {
        product.id: product
        for product in Product.objects.select_for_update().filter(id__in=ids).order_by('id')
    }
    missing = [str(pid) for pid in ids if pid not in products]
    if missing:
        raise NotFound(f'Product not found: {", ".join(missing)}')
    return products


def net_deltas(pairs):
    """Sum (product_id, delta) pairs into {product_id: net delta}"""
    totals = defaultdict(int)
    for product_id, delta in pairs:
        totals[int(product_id)] += delta
    return dict(totals)


def check_stock_available(products, deltas):
    """
    Reject deltas that would take stock below zero when negative stock is disallowed.
    `products` is the dict returned by lock_products.
    """
    if settings.INVENTORY_ALLOW_NEGATIVE_STOCK:
        return
    for product_id, delta in deltas.items():
        product = products[product_id]
        if delta < 0 and product.quantity_in_stock + delta < 0:
            logger.warning(f"Insufficient stock for product {product.id}: available {product.quantity_in_stock}, requested {-delta}")
            raise InvalidArgument(
                f'Insufficient stock for {product.name}: available {product.quantity_in_stock}, requested {-delta}'
            )


def adjust_stock(product_id, delta, user=None, reason='correction', reference='', notes=''):
    """
    Apply a signed whole-unit delta to a product's stock and record it.

    A zero delta writes nothing and returns None.
    """
    delta = int(delta)
    if delta == 0:
        return None

    with transaction.atomic():
        products = lock_products([product_id])
        product = products[int(product_id)]
        check_stock_available(products, {product.id: delta})

        Product.objects.filter(id=product.id).update(quantity_in_stock=F('quantity_in_stock') + delta)
        product.refresh_from_db(fields=['quantity_in_stock'])

        adjustment = StockAdjustment.objects.create(
            adjustment_type='in' if delta > 0 else 'out',
            product=product,
            quantity=abs(delta),
            quantity_after=product.quantity_in_stock,
            reason=reason,
            reference=str(reference or ''),
            notes=notes or '',
            created_by=user if user is not None and user.is_authenticated else None,
        )

    logger.info(f"Stock adjusted: product={product.id} delta={delta} now={product.quantity_in_stock} reason={reason}")
    return adjustment
