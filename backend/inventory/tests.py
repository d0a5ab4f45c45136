"""
Test suite for stock adjustments
Tests: adjust_stock, negative stock policy, product locking and the adjustment API
"""
from decimal import Decimal
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from backend.core.exceptions import InvalidArgument, NotFound
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import StockAdjustment
from .services import adjust_stock, lock_products, net_deltas, to_stock_units


class StockUnitTests(SimpleTestCase):

    def test_truncates_toward_zero(self):
        self.assertEqual(to_stock_units(Decimal('2.9')), 2)
        self.assertEqual(to_stock_units('0.5'), 0)
        self.assertEqual(to_stock_units(Decimal('-1.7')), -1)
        self.assertEqual(to_stock_units(3), 3)

    def test_net_deltas(self):
        self.assertEqual(net_deltas([(1, -2), ('1', -3), (2, 4)]), {1: -5, 2: 4})


class AdjustStockTests(TestCase):
    """Test adjust_stock"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(quantity_in_stock=10)

    def test_increment_and_decrement(self):
        adjustment = adjust_stock(self.product.id, 5, user=self.user, reason='found')
        self.assertEqual(adjustment.adjustment_type, 'in')
        self.assertEqual(adjustment.quantity, 5)
        self.assertEqual(adjustment.quantity_after, 15)
        self.assertEqual(adjustment.created_by, self.user)

        adjustment = adjust_stock(self.product.id, -7, reason='damaged', reference='SHELF-3')
        self.assertEqual(adjustment.adjustment_type, 'out')
        self.assertEqual(adjustment.delta, -7)
        self.assertEqual(adjustment.reference, 'SHELF-3')

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 8)

    def test_zero_delta_writes_nothing(self):
        self.assertIsNone(adjust_stock(self.product.id, 0))
        self.assertEqual(StockAdjustment.objects.count(), 0)

    def test_negative_stock_allowed_by_default(self):
        adjust_stock(self.product.id, -15)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, -5)

    @override_settings(INVENTORY_ALLOW_NEGATIVE_STOCK=False)
    def test_negative_stock_rejected_when_disallowed(self):
        with self.assertRaises(InvalidArgument):
            adjust_stock(self.product.id, -11)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 10)
        self.assertEqual(StockAdjustment.objects.count(), 0)

        adjust_stock(self.product.id, -10)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 0)

    def test_unknown_product(self):
        with self.assertRaises(NotFound):
            adjust_stock(999999, 1)

    def test_lock_products_reports_missing_ids(self):
        other = TestDataFactory.create_product()
        products = lock_products([other.id, self.product.id, other.id])
        self.assertEqual(set(products), {self.product.id, other.id})
        with self.assertRaises(NotFound):
            lock_products([self.product.id, 999999])


class StockAdjustmentAPITests(TestCase):
    """Test stock adjustment API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(quantity_in_stock=4)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_adjustment(self):
        data = {
            'product': self.product.id,
            'adjustment_type': 'out',
            'quantity': 3,
            'reason': 'damaged',
            'notes': 'Dropped pallet'
        }
        response = self.client.post('/api/v1/stock-adjustments/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity_after'], 1)
        self.assertEqual(response.data['created_by'], self.user.id)
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust', object_reference=self.product.sku).exists())

    def test_workflow_reasons_are_not_manual(self):
        data = {'product': self.product.id, 'adjustment_type': 'in', 'quantity': 1, 'reason': 'production_output'}
        response = self.client.post('/api/v1/stock-adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(INVENTORY_ALLOW_NEGATIVE_STOCK=False)
    def test_insufficient_stock(self):
        data = {'product': self.product.id, 'adjustment_type': 'out', 'quantity': 5}
        response = self.client.post('/api/v1/stock-adjustments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'invalid_argument')

    def test_list_filters_by_product(self):
        other = TestDataFactory.create_product()
        adjust_stock(self.product.id, 2)
        adjust_stock(other.id, 2)
        response = self.client.get('/api/v1/stock-adjustments/', {'product': self.product.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['product'], self.product.id)
