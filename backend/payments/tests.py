"""
Test suite for payment reconciliation
Tests: balance checks, paid status, refunds, updates, soft delete and search
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import IllegalState, InvalidArgument, NotFound
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Payment
from . import services


class PaymentCreateTests(TestCase):
    """Test create_payment against the order balance"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        product_a = TestDataFactory.create_product(price=Decimal('10.00'))
        product_b = TestDataFactory.create_product(price=Decimal('5.00'))
        self.order = TestDataFactory.create_order(
            self.user, items=[(product_a, 2, '10.00'), (product_b, 1, '5.00')]
        )

    def test_order_total(self):
        self.assertEqual(self.order.total_amount, Decimal('25.00'))

    def test_partial_payment_keeps_status(self):
        payment = services.create_payment(self.order.id, '10.00', 'cash', user=self.user)
        self.assertEqual(payment.status, 'pending')
        self.assertEqual(payment.amount, Decimal('10.00'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, 'pending')

    def test_full_payment_marks_order_paid(self):
        services.create_payment(self.order.id, Decimal('25.00'), 'CASH', user=self.user)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, 'paid')
        self.assertEqual(services.get_total_paid(self.order.id), Decimal('25.00'))

    def test_split_payments_cover_order(self):
        services.create_payment(self.order.id, '20.00', 'credit_card')
        services.create_payment(self.order.id, '5.00', 'cash')
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, 'paid')

    def test_overpayment_is_rejected_without_writes(self):
        services.create_payment(self.order.id, '25.00', 'cash')
        with self.assertRaises(InvalidArgument):
            services.create_payment(self.order.id, '0.01', 'cash')
        self.assertEqual(Payment.objects.filter(order=self.order).count(), 1)
        self.assertEqual(services.get_total_paid(self.order.id), Decimal('25.00'))

    def test_amount_must_be_positive(self):
        for amount in ('0', '-5.00', 'abc'):
            with self.assertRaises(InvalidArgument):
                services.create_payment(self.order.id, amount, 'cash')
        self.assertEqual(Payment.objects.count(), 0)

    def test_unknown_method(self):
        with self.assertRaises(InvalidArgument):
            services.create_payment(self.order.id, '5.00', 'barter')

    def test_unknown_order(self):
        with self.assertRaises(NotFound):
            services.create_payment(999999, '5.00', 'cash')

    def test_deleted_payments_free_the_balance(self):
        payment = services.create_payment(self.order.id, '25.00', 'cash')
        services.delete_payment(payment.id)
        services.create_payment(self.order.id, '25.00', 'cash')
        self.assertEqual(services.get_total_paid(self.order.id), Decimal('25.00'))

    def test_audit_entry_written(self):
        payment = services.create_payment(self.order.id, '25.00', 'cash', user=self.user)
        entry = AuditLog.objects.get(action='payment_add')
        self.assertEqual(entry.object_id, str(payment.id))
        self.assertEqual(entry.changes['payment_status'], {'old': 'pending', 'new': 'paid'})


class PaymentRefundTests(TestCase):
    """Test refund_payment"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        product = TestDataFactory.create_product()
        self.order = TestDataFactory.create_order(self.user, items=[(product, 2, '10.00')])
        self.payment = TestDataFactory.create_payment(
            self.order, '15.00', status='completed', user=self.user, transaction_id='TXN42'
        )

    def test_refund_appends_negated_row(self):
        refund = services.refund_payment(self.payment.id)

        self.assertNotEqual(refund.id, self.payment.id)
        self.assertEqual(refund.amount, Decimal('-15.00'))
        self.assertEqual(refund.status, 'refunded')
        self.assertEqual(refund.payment_method, self.payment.payment_method)
        self.assertEqual(refund.transaction_id, 'REFUND_TXN42')
        self.assertEqual(refund.notes, f'Refund for payment #{self.payment.id}')
        self.assertEqual(refund.created_by, self.user)

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, 'completed')
        self.assertEqual(self.payment.amount, Decimal('15.00'))
        self.assertEqual(services.get_total_paid(self.order.id), Decimal('0.00'))

    def test_refund_without_transaction_id(self):
        Payment.objects.filter(pk=self.payment.pk).update(transaction_id=None)
        refund = services.refund_payment(self.payment.id)
        self.assertTrue(refund.transaction_id.startswith('REFUND_'))
        self.assertTrue(refund.transaction_id[len('REFUND_'):].isdigit())

    def test_only_completed_payments_can_be_refunded(self):
        pending = TestDataFactory.create_payment(self.order, '5.00', status='pending')
        with self.assertRaises(IllegalState):
            services.refund_payment(pending.id)
        self.assertEqual(Payment.objects.filter(status='refunded').count(), 0)

    def test_refund_of_deleted_payment(self):
        self.payment.soft_delete()
        with self.assertRaises(NotFound):
            services.refund_payment(self.payment.id)


class PaymentUpdateTests(TestCase):
    """Test update_payment and delete_payment"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.order = TestDataFactory.create_order(self.user, items=[(TestDataFactory.create_product(), 1, '30.00')])
        self.payment = TestDataFactory.create_payment(self.order, '10.00', transaction_id='T1')

    def test_only_supplied_fields_change(self):
        payment = services.update_payment(self.payment.id, status='COMPLETED')
        payment.refresh_from_db()
        self.assertEqual(payment.status, 'completed')
        self.assertEqual(payment.amount, Decimal('10.00'))
        self.assertEqual(payment.transaction_id, 'T1')

    def test_update_does_not_touch_order_status(self):
        services.update_payment(self.payment.id, amount='30.00')
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, 'pending')

    def test_unknown_field(self):
        with self.assertRaises(InvalidArgument):
            services.update_payment(self.payment.id, order=self.order.id)

    def test_soft_delete(self):
        services.delete_payment(self.payment.id)
        self.assertFalse(Payment.objects.filter(pk=self.payment.pk).exists())
        self.assertTrue(Payment.all_objects.get(pk=self.payment.pk).is_deleted)
        with self.assertRaises(NotFound):
            services.get_payment(self.payment.id)
        with self.assertRaises(NotFound):
            services.update_payment(self.payment.id, notes='late edit')


class PaymentSearchTests(TestCase):
    """Test search_payments and get_payments_for_order"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.order_a = TestDataFactory.create_order(self.user, items=[(TestDataFactory.create_product(), 1, '50.00')])
        self.order_b = TestDataFactory.create_order(self.user, items=[(TestDataFactory.create_product(), 1, '50.00')])
        self.first = TestDataFactory.create_payment(self.order_a, '10.00', status='completed')
        self.second = TestDataFactory.create_payment(self.order_a, '5.00')
        self.third = TestDataFactory.create_payment(self.order_b, '7.00', status='completed')
        TestDataFactory.create_payment(self.order_b, '1.00').soft_delete()

    def _ids(self, params):
        return [payment.id for payment in services.search_payments(params)]

    def test_search_without_filters_excludes_deleted(self):
        self.assertEqual(self._ids({}), [self.third.id, self.second.id, self.first.id])

    def test_search_by_order_and_status(self):
        self.assertEqual(self._ids({'order': self.order_a.id}), [self.second.id, self.first.id])
        self.assertEqual(self._ids({'status': 'Completed'}), [self.third.id, self.first.id])
        self.assertEqual(self._ids({'order': self.order_a.id, 'status': 'completed'}), [self.first.id])

    def test_malformed_order_filter_is_rejected(self):
        with self.assertRaises(InvalidArgument):
            self._ids({'order': 'abc'})
        self.assertEqual(self._ids({'order': self.order_b.id}), [self.third.id])

    def test_search_by_date_is_inclusive(self):
        today = self.first.created_at.date().isoformat()
        self.assertEqual(len(self._ids({'start_date': today, 'end_date': today})), 3)
        self.assertEqual(self._ids({'end_date': '2000-01-01'}), [])

    def test_payments_for_order(self):
        payments = services.get_payments_for_order(self.order_b.id)
        self.assertEqual([payment.id for payment in payments], [self.third.id])


class PaymentAPITests(TestCase):
    """Test payment API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        product = TestDataFactory.create_product()
        self.order = TestDataFactory.create_order(self.user, items=[(product, 2, '10.00')])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_payment(self):
        data = {'order': self.order.id, 'amount': '20.00', 'payment_method': 'Credit_Card'}
        response = self.client.post('/api/v1/payments/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['payment_method'], 'credit_card')
        self.assertEqual(response.data['created_by'], self.user.id)

        response = self.client.get(f'/api/v1/payments/order/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_status'], 'paid')
        self.assertEqual(response.data['total_paid'], '20.00')
        self.assertEqual(response.data['balance'], '0.00')

    def test_overpayment_returns_400(self):
        data = {'order': self.order.id, 'amount': '20.01', 'payment_method': 'cash'}
        response = self.client.post('/api/v1/payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'invalid_argument')

    def test_refund_endpoint(self):
        payment = TestDataFactory.create_payment(self.order, '20.00', status='completed')
        response = self.client.post(f'/api/v1/payments/{payment.id}/refund/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], '-20.00')

        pending = TestDataFactory.create_payment(self.order, '1.00')
        response = self.client.post(f'/api/v1/payments/{pending.id}/refund/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_list_rejects_malformed_order_filter(self):
        TestDataFactory.create_payment(self.order, '5.00')
        response = self.client.get('/api/v1/payments/', {'order': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'invalid_argument')

    def test_patch_and_delete(self):
        payment = TestDataFactory.create_payment(self.order, '5.00')
        response = self.client.patch(f'/api/v1/payments/{payment.id}/', {'notes': 'Till 2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'Till 2')
        self.assertEqual(response.data['amount'], '5.00')

        response = self.client.delete(f'/api/v1/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(f'/api/v1/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
