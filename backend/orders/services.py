"""
Order aggregate workflows: checkout, cancellation and status changes.
"""
import logging
import uuid
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from backend.catalog.models import Product
from backend.core.exceptions import IllegalState, InvalidArgument, NotFound
from backend.core.utils import create_audit_log, normalize_choice
from backend.parties.models import Customer
from .filters import OrderFilter
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


def generate_order_number():
    """Generate a unique order number"""
    prefix = settings.ORDER_NUMBER_PREFIX
    order_number = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while Order.objects.filter(order_number=order_number).exists():
        order_number = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return order_number


def to_quantity(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'Invalid item quantity: {value}')


def to_price(value):
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f'Invalid unit price: {value}')
    if not price.is_finite():
        raise InvalidArgument(f'Invalid unit price: {value}')
    return price.quantize(Decimal('0.01'))


def to_product_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'Invalid product id: {value}')


def get_order(order_id, lock=False):
    queryset = Order.objects.select_for_update() if lock else Order.objects.all()
    order = queryset.filter(pk=order_id).first()
    if order is None:
        raise NotFound(f'Order not found with id: {order_id}')
    return order


def create_order(customer_id, items, user=None, status='pending', customer_notes=None):
    """
    Create an order with its items in one transaction.

    `items` is a list of dicts with `product` (id), `quantity` and an optional
    `unit_price` (defaults to the product's current price). Lines start with
    zero discount and tax.
    """
    status = normalize_choice(status or 'pending', Order.STATUS_CHOICES, 'status')
    if not items:
        raise InvalidArgument('Order must contain at least one item')

    lines = []
    for entry in items:
        quantity = to_quantity(entry.get('quantity'))
        if quantity < 1:
            raise InvalidArgument('Item quantity must be at least 1')
        unit_price = entry.get('unit_price')
        if unit_price is not None:
            unit_price = to_price(unit_price)
            if unit_price < 0:
                raise InvalidArgument('Item unit price cannot be negative')
        lines.append((to_product_id(entry.get('product')), quantity, unit_price))

    with transaction.atomic():
        customer = Customer.objects.filter(pk=customer_id).first()
        if customer is None:
            raise NotFound(f'Customer not found with id: {customer_id}')

        product_ids = {product_id for product_id, _, _ in lines}
        products = Product.objects.in_bulk(product_ids)
        missing = sorted(pid for pid in product_ids if pid not in products)
        if missing:
            raise NotFound(f'Product not found: {", ".join(str(pid) for pid in missing)}')

        order = Order(
            order_number=generate_order_number(),
            user=user,
            customer=customer,
            status=status,
            payment_status='pending',
            customer_notes=customer_notes,
        )

        order_items = []
        for product_id, quantity, unit_price in lines:
            product = products[product_id]
            item = OrderItem(
                product=product,
                quantity=quantity,
                unit_price=unit_price if unit_price is not None else product.price,
                discount_amount=Decimal('0.00'),
                tax_amount=Decimal('0.00'),
            )
            item.calculate_total()
            order_items.append(item)

        # Line totals are final before the order totals are derived
        order.calculate_totals(order_items)
        order.save()

        for item in order_items:
            item.order = order
        OrderItem.objects.bulk_create(order_items)

    logger.info(f"Order created: {order.order_number} customer={customer.id} total={order.total_amount}")
    create_audit_log(
        action='order_create',
        model_name='Order',
        object_id=order.id,
        user=user,
        object_name=f"Order {order.order_number}",
        object_reference=order.order_number,
        changes={
            'customer': customer.name,
            'status': order.status,
            'items': len(order_items),
            'subtotal': str(order.subtotal),
            'total_amount': str(order.total_amount),
        }
    )
    return order


def cancel_order(order_id, user=None):
    """Cancel an order; cancelled and completed orders are final"""
    with transaction.atomic():
        order = get_order(order_id, lock=True)
        if order.status == 'cancelled':
            raise IllegalState('Order is already cancelled')
        if order.status == 'completed':
            raise IllegalState('Cannot cancel a completed order')

        old_status = order.status
        order.status = 'cancelled'
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Order cancelled: {order.order_number}")
    create_audit_log(
        action='order_cancel',
        model_name='Order',
        object_id=order.id,
        user=user,
        object_name=f"Order {order.order_number}",
        object_reference=order.order_number,
        changes={'status': {'old': old_status, 'new': order.status}},
    )
    return order


def update_order_status(order_id, status, user=None):
    """Set the order status directly; no transition graph is enforced"""
    status = normalize_choice(status, Order.STATUS_CHOICES, 'status')
    with transaction.atomic():
        order = get_order(order_id, lock=True)
        old_status = order.status
        order.status = status
        order.save(update_fields=['status', 'updated_at'])

    create_audit_log(
        action='order_status',
        model_name='Order',
        object_id=order.id,
        user=user,
        object_name=f"Order {order.order_number}",
        object_reference=order.order_number,
        changes={'status': {'old': old_status, 'new': order.status}},
    )
    return order


def update_payment_status(order_id, payment_status, user=None):
    payment_status = normalize_choice(payment_status, Order.PAYMENT_STATUS_CHOICES, 'payment_status')
    with transaction.atomic():
        order = get_order(order_id, lock=True)
        old_payment_status = order.payment_status
        order.payment_status = payment_status
        order.save(update_fields=['payment_status', 'updated_at'])

    create_audit_log(
        action='order_status',
        model_name='Order',
        object_id=order.id,
        user=user,
        object_name=f"Order {order.order_number}",
        object_reference=order.order_number,
        changes={'payment_status': {'old': old_payment_status, 'new': order.payment_status}},
    )
    return order


def search_orders(params=None):
    """
    Filter orders by start_date, end_date (order date, inclusive), status,
    payment_status and customer. Every filter is optional.
    """
    queryset = Order.objects.select_related('customer', 'user').prefetch_related('items__product')
    filterset = OrderFilter(params or {}, queryset=queryset)
    if not filterset.is_valid():
        raise InvalidArgument('; '.join(f'{field}: {" ".join(errors)}' for field, errors in filterset.errors.items()))
    return filterset.qs.order_by('-order_date', '-id')
