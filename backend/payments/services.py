"""
Payment reconciler: accepts charges against an order's balance, records
refunds as new negated rows and answers payment queries.

Concurrent payments on one order are serialised by locking the order row
before the balance is read.
"""
import logging
import time
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Sum

from backend.core.exceptions import IllegalState, InvalidArgument, NotFound
from backend.core.utils import create_audit_log, normalize_choice
from backend.orders.models import Order
from .filters import PaymentFilter
from .models import Payment

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('amount', 'payment_method', 'status', 'notes', 'transaction_id')


def to_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f'Invalid amount: {value}')
    if not amount.is_finite():
        raise InvalidArgument(f'Invalid amount: {value}')
    return amount.quantize(Decimal('0.01'))


def get_payment(payment_id, lock=False):
    """Load a non-deleted payment"""
    queryset = Payment.objects.select_for_update() if lock else Payment.objects.all()
    payment = queryset.filter(pk=payment_id).first()
    if payment is None:
        raise NotFound(f'Payment not found with id: {payment_id}')
    return payment


def get_total_paid(order_id):
    """Sum of all non-deleted payment amounts for the order, refunds included"""
    total = Payment.objects.filter(order_id=order_id).aggregate(total=Sum('amount'))['total']
    return total if total is not None else Decimal('0.00')


def get_payments_for_order(order_id):
    return Payment.objects.filter(order_id=order_id).select_related('order', 'created_by').order_by('-created_at', '-id')


def create_payment(order_id, amount, payment_method, user=None, notes=None, transaction_id=None):
    """
    Record a charge against an order.

    Rejected with InvalidArgument, before anything is written, if it would
    take the paid total past the order total. When the order is fully covered
    its payment status becomes 'paid' in the same transaction.
    """
    amount = to_amount(amount)
    if amount <= 0:
        raise InvalidArgument('Payment amount must be greater than zero')
    payment_method = normalize_choice(payment_method, Payment.PAYMENT_METHOD_CHOICES, 'payment_method')

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise NotFound(f'Order not found with id: {order_id}')

        total_paid = get_total_paid(order.id)
        new_total = total_paid + amount
        if new_total > order.total_amount:
            logger.warning(f"Payment rejected for order {order.order_number}: paid {total_paid} + {amount} exceeds total {order.total_amount}")
            raise InvalidArgument('Payment amount exceeds order balance')

        payment = Payment.objects.create(
            order=order,
            amount=amount,
            payment_method=payment_method,
            status='pending',
            notes=notes,
            transaction_id=transaction_id,
            created_by=user,
        )

        old_payment_status = order.payment_status
        if new_total >= order.total_amount:
            order.payment_status = 'paid'
            order.save(update_fields=['payment_status', 'updated_at'])

    logger.info(f"Payment {payment.id} recorded for order {order.order_number}: {amount} ({payment_method})")
    if order.payment_status != old_payment_status:
        logger.info(f"Order {order.order_number} fully paid")

    create_audit_log(
        action='payment_add',
        model_name='Payment',
        object_id=payment.id,
        user=user,
        object_name=f"Payment for Order {order.order_number}",
        object_reference=order.order_number,
        changes={
            'order_id': order.id,
            'amount': str(amount),
            'payment_method': payment_method,
            'total_paid': {'old': str(total_paid), 'new': str(new_total)},
            'payment_status': {'old': old_payment_status, 'new': order.payment_status},
        }
    )
    return payment


def update_payment(payment_id, user=None, **fields):
    """
    Apply only the supplied fields. The order's payment status is not
    recomputed here.
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidArgument(f'Cannot update fields: {", ".join(sorted(unknown))}')

    if 'amount' in fields:
        fields['amount'] = to_amount(fields['amount'])
    if 'payment_method' in fields:
        fields['payment_method'] = normalize_choice(fields['payment_method'], Payment.PAYMENT_METHOD_CHOICES, 'payment_method')
    if 'status' in fields:
        fields['status'] = normalize_choice(fields['status'], Payment.STATUS_CHOICES, 'status')

    with transaction.atomic():
        payment = get_payment(payment_id, lock=True)
        changes = {}
        for field, value in fields.items():
            old_value = getattr(payment, field)
            if old_value != value:
                changes[field] = {'old': str(old_value) if old_value is not None else None,
                                  'new': str(value) if value is not None else None}
            setattr(payment, field, value)
        if fields:
            payment.save(update_fields=list(fields) + ['updated_at'])

    if changes:
        create_audit_log(
            action='payment_update',
            model_name='Payment',
            object_id=payment.id,
            user=user,
            object_name=f"Payment for Order {payment.order.order_number}",
            object_reference=payment.order.order_number,
            changes=changes,
        )
    return payment


def delete_payment(payment_id, user=None):
    """Soft-delete a payment; the order's payment status is left as is"""
    payment = get_payment(payment_id)
    payment.soft_delete()
    logger.info(f"Payment {payment.id} deleted")
    create_audit_log(
        action='payment_delete',
        model_name='Payment',
        object_id=payment.id,
        user=user,
        object_name=f"Payment for Order {payment.order.order_number}",
        object_reference=payment.order.order_number,
        changes={'amount': str(payment.amount)},
    )
    return payment


def refund_payment(payment_id, user=None, notes=None):
    """
    Refund a completed payment by appending a negated 'refunded' row.
    The original payment is left unchanged.
    """
    with transaction.atomic():
        original = get_payment(payment_id, lock=True)
        if original.status != 'completed':
            raise IllegalState('Only completed payments can be refunded')

        reference = original.transaction_id or str(int(time.time() * 1000))
        refund = Payment.objects.create(
            order=original.order,
            amount=-original.amount,
            payment_method=original.payment_method,
            status='refunded',
            notes=notes or f'Refund for payment #{original.id}',
            transaction_id=f'REFUND_{reference}'[:100],
            created_by=original.created_by,
        )

    logger.info(f"Payment {original.id} refunded as payment {refund.id} ({refund.amount})")
    create_audit_log(
        action='refund',
        model_name='Payment',
        object_id=refund.id,
        user=user,
        object_name=f"Refund for payment #{original.id}",
        object_reference=original.order.order_number,
        changes={
            'original_payment_id': original.id,
            'amount': str(refund.amount),
            'transaction_id': refund.transaction_id,
        }
    )
    return refund


def search_payments(params=None):
    """
    Filter non-deleted payments by order, status and created_at range.
    Every filter is optional; newest first.
    """
    queryset = Payment.objects.select_related('order', 'created_by')
    filterset = PaymentFilter(params or {}, queryset=queryset)
    if not filterset.is_valid():
        raise InvalidArgument('; '.join(f'{field}: {" ".join(errors)}' for field, errors in filterset.errors.items()))
    return filterset.qs.order_by('-created_at', '-id')
