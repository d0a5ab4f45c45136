"""
Test suite for the product catalog
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.services import adjust_stock
from .models import Product


class ProductAPITests(TestCase):
    """Test product API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product_generates_sku(self):
        data = {'name': 'Brown Bread', 'price': '45.00', 'cost_price': '30.00'}
        response = self.client.post('/api/v1/products/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['sku'].startswith('BROW-'))
        self.assertEqual(response.data['quantity_in_stock'], 0)

    def test_stock_is_read_only(self):
        data = {'name': 'Rusk', 'sku': 'RUSK-1', 'price': '20.00', 'quantity_in_stock': 50}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Product.objects.get(sku='RUSK-1').quantity_in_stock, 0)

    def test_duplicate_sku_rejected(self):
        TestDataFactory.create_product(sku='DUP-1')
        response = self.client.post('/api/v1/products/', {'name': 'Other', 'sku': 'DUP-1', 'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/products/', {'name': 'Bad', 'price': '-1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_price(self):
        product = TestDataFactory.create_product(price=Decimal('10.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '12.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal('12.50'))

    def test_stock_filters(self):
        stocked = TestDataFactory.create_product(name='Stocked')
        TestDataFactory.create_product(name='Empty')
        adjust_stock(stocked.id, 3)

        response = self.client.get('/api/v1/products/', {'in_stock': 'true'})
        self.assertEqual([row['name'] for row in response.data['results']], ['Stocked'])
        response = self.client.get('/api/v1/products/', {'out_of_stock': 'true'})
        self.assertEqual([row['name'] for row in response.data['results']], ['Empty'])

    def test_search_matches_exact_barcode(self):
        scanned = TestDataFactory.create_product(name='Scanned')
        Product.objects.filter(pk=scanned.pk).update(barcode='8901234567890')
        TestDataFactory.create_product(name='Unscanned')

        response = self.client.get('/api/v1/products/', {'search': '8901234567890'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['name'] for row in response.data['results']], ['Scanned'])
        self.assertEqual(response.data['results'][0]['barcode'], '8901234567890')

        response = self.client.get('/api/v1/products/', {'search': '89012345'})
        self.assertEqual(response.data['count'], 0)
