"""
Test suite for the order workflows
Tests: checkout totals, cancellation, status changes and order search
"""
from datetime import datetime
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.exceptions import IllegalState, InvalidArgument, NotFound
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockAdjustment
from .models import Order, OrderItem
from . import services


class OrderCreateTests(TestCase):
    """Test create_order"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.customer = TestDataFactory.create_customer()
        self.product_a = TestDataFactory.create_product(price=Decimal('10.00'), quantity_in_stock=5)
        self.product_b = TestDataFactory.create_product(price=Decimal('5.00'), quantity_in_stock=5)

    def test_totals_are_derived_from_items(self):
        order = services.create_order(self.customer.id, [
            {'product': self.product_a.id, 'quantity': 2, 'unit_price': Decimal('10.00')},
            {'product': self.product_b.id, 'quantity': 1, 'unit_price': Decimal('5.00')},
        ], user=self.user)

        order.refresh_from_db()
        self.assertEqual(order.subtotal, Decimal('25.00'))
        self.assertEqual(order.total_amount, Decimal('25.00'))
        self.assertEqual(order.status, 'pending')
        self.assertEqual(order.payment_status, 'pending')
        self.assertTrue(order.order_number.startswith('ORD-'))

        items = list(order.items.all())
        self.assertEqual([item.product_id for item in items], [self.product_a.id, self.product_b.id])
        self.assertEqual([item.total_price for item in items], [Decimal('20.00'), Decimal('5.00')])
        self.assertEqual(sum(item.total_price for item in items), order.subtotal)

    def test_unit_price_defaults_to_product_price(self):
        order = services.create_order(self.customer.id, [{'product': self.product_b.id, 'quantity': 3}])
        self.assertEqual(order.items.get().unit_price, Decimal('5.00'))
        self.assertEqual(order.total_amount, Decimal('15.00'))

    def test_status_is_case_insensitive(self):
        order = services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 1}],
                                      status='PROCESSING')
        self.assertEqual(order.status, 'processing')

    def test_stock_is_not_touched(self):
        services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 2}])
        self.product_a.refresh_from_db()
        self.assertEqual(self.product_a.quantity_in_stock, 5)
        self.assertEqual(StockAdjustment.objects.count(), 0)

    def test_unknown_customer(self):
        with self.assertRaises(NotFound):
            services.create_order(999999, [{'product': self.product_a.id, 'quantity': 1}])
        self.assertEqual(Order.objects.count(), 0)

    def test_unknown_product_writes_nothing(self):
        with self.assertRaises(NotFound):
            services.create_order(self.customer.id, [
                {'product': self.product_a.id, 'quantity': 1},
                {'product': 999999, 'quantity': 1},
            ])
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_invalid_items(self):
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [])
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 0}])
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 1, 'unit_price': '-1'}])

    def test_non_numeric_input_is_invalid(self):
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 'two'}])
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 1, 'unit_price': 'ten'}])
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 1, 'unit_price': 'NaN'}])
        with self.assertRaises(InvalidArgument):
            services.create_order(self.customer.id, [{'product': 'abc', 'quantity': 1}])
        self.assertEqual(Order.objects.count(), 0)

    def test_audit_entry_written(self):
        order = services.create_order(self.customer.id, [{'product': self.product_a.id, 'quantity': 1}], user=self.user)
        entry = AuditLog.objects.get(action='order_create')
        self.assertEqual(entry.object_reference, order.order_number)
        self.assertEqual(entry.changes['total_amount'], '10.00')


class OrderTotalsTests(TestCase):
    """Line and order totals with non-zero discount and tax"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()

    def test_item_total_subtracts_discount_and_adds_tax(self):
        item = OrderItem(
            product=self.product,
            quantity=3,
            unit_price=Decimal('10.00'),
            discount_amount=Decimal('4.00'),
            tax_amount=Decimal('1.50')
        )
        self.assertEqual(item.calculate_total(), Decimal('27.50'))
        self.assertEqual(item.total_price, Decimal('27.50'))

    def test_order_total_adds_tax_and_subtracts_discount(self):
        order = TestDataFactory.create_order(self.user)
        first = OrderItem(order=order, product=self.product, quantity=2, unit_price=Decimal('10.00'),
                          discount_amount=Decimal('1.00'), tax_amount=Decimal('0.50'))
        second = OrderItem(order=order, product=self.product, quantity=1, unit_price=Decimal('5.00'),
                           discount_amount=Decimal('0.00'), tax_amount=Decimal('2.00'))
        for item in (first, second):
            item.calculate_total()
            item.save()

        order.tax_amount = Decimal('3.00')
        order.discount_amount = Decimal('7.25')
        order.calculate_totals()
        order.save()
        order.refresh_from_db()

        self.assertEqual(first.total_price, Decimal('19.50'))
        self.assertEqual(second.total_price, Decimal('7.00'))
        self.assertEqual(order.subtotal, Decimal('26.50'))
        self.assertEqual(order.total_amount, Decimal('22.25'))
        self.assertEqual(order.total_amount, order.subtotal + order.tax_amount - order.discount_amount)


class OrderStatusTests(TestCase):
    """Test cancel_order, update_order_status and update_payment_status"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        product = TestDataFactory.create_product(quantity_in_stock=10)
        self.order = TestDataFactory.create_order(self.user, items=[(product, 2, '10.00')])
        self.product = product

    def test_cancel_pending_order(self):
        order = services.cancel_order(self.order.id, user=self.user)
        self.assertEqual(order.status, 'cancelled')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 10)

    def test_cancel_twice_is_illegal(self):
        services.cancel_order(self.order.id)
        with self.assertRaises(IllegalState):
            services.cancel_order(self.order.id)

    def test_cancel_completed_is_illegal(self):
        Order.objects.filter(pk=self.order.id).update(status='completed')
        with self.assertRaises(IllegalState):
            services.cancel_order(self.order.id)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'completed')

    def test_status_changes_are_unrestricted(self):
        services.update_order_status(self.order.id, 'completed')
        order = services.update_order_status(self.order.id, 'Pending')
        self.assertEqual(order.status, 'pending')

    def test_unknown_status(self):
        with self.assertRaises(InvalidArgument):
            services.update_order_status(self.order.id, 'shipped')

    def test_update_payment_status(self):
        order = services.update_payment_status(self.order.id, 'AUTHORIZED')
        self.assertEqual(order.payment_status, 'authorized')

    def test_missing_order(self):
        with self.assertRaises(NotFound):
            services.cancel_order(999999)
        with self.assertRaises(NotFound):
            services.update_order_status(999999, 'pending')


class OrderSearchTests(TestCase):
    """Test search_orders filters"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.customer = TestDataFactory.create_customer()
        self.march = TestDataFactory.create_order(self.user, customer=self.customer, status='completed')
        self.april = TestDataFactory.create_order(self.user, payment_status='paid')
        Order.objects.filter(pk=self.march.pk).update(
            order_date=timezone.make_aware(datetime(2024, 3, 15, 18, 30)))
        Order.objects.filter(pk=self.april.pk).update(
            order_date=timezone.make_aware(datetime(2024, 4, 2, 9, 0)))

    def _ids(self, params):
        return [order.id for order in services.search_orders(params)]

    def test_no_filters_returns_all_newest_first(self):
        self.assertEqual(self._ids({}), [self.april.id, self.march.id])

    def test_date_range_is_inclusive(self):
        self.assertEqual(self._ids({'start_date': '2024-03-15', 'end_date': '2024-03-15'}), [self.march.id])
        self.assertEqual(self._ids({'start_date': '2024-03-16'}), [self.april.id])

    def test_status_filters(self):
        self.assertEqual(self._ids({'status': 'COMPLETED'}), [self.march.id])
        self.assertEqual(self._ids({'payment_status': 'paid'}), [self.april.id])
        self.assertEqual(self._ids({'customer': self.customer.id}), [self.march.id])

    def test_malformed_customer_filter_is_rejected(self):
        with self.assertRaises(InvalidArgument):
            self._ids({'customer': 'abc'})

    def test_invalid_status_filter(self):
        with self.assertRaises(InvalidArgument):
            self._ids({'status': 'shipped'})


class OrderAPITests(TestCase):
    """Test order API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(price=Decimal('10.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_order(self):
        data = {
            'customer': self.customer.id,
            'items': [{'product': self.product.id, 'quantity': 2, 'unit_price': '10.00'}],
            'customer_notes': 'Leave at the door'
        }
        response = self.client.post('/api/v1/orders/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '20.00')
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['user'], self.user.id)

    def test_create_order_unknown_customer(self):
        data = {'customer': 999999, 'items': [{'product': self.product.id, 'quantity': 1}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'not_found')

    def test_create_order_rejects_zero_quantity(self):
        data = {'customer': self.customer.id, 'items': [{'product': self.product.id, 'quantity': 0}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_endpoint(self):
        order = TestDataFactory.create_order(self.user, items=[(self.product, 1, '10.00')])
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelled')

        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'illegal_state')

    def test_status_endpoint_accepts_any_case(self):
        order = TestDataFactory.create_order(self.user)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'PROCESSING'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'processing')

    def test_list_is_paginated(self):
        for _ in range(3):
            TestDataFactory.create_order(self.user)
        response = self.client.get('/api/v1/orders/', {'size': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)

    def test_list_invalid_filter(self):
        response = self.client.get('/api/v1/orders/', {'start_date': 'not-a-date'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_not_found(self):
        response = self.client.get('/api/v1/orders/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
