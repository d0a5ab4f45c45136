"""
Test suite for customers
"""
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Customer


class CustomerAPITests(TestCase):
    """Test customer API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        data = {'name': 'Asha Traders', 'phone': '9876543210', 'email': 'asha@example.com'}
        response = self.client.post('/api/v1/customers/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Asha Traders')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Customer').exists())

    def test_search(self):
        TestDataFactory.create_customer(name='Asha Traders', phone='9000000001')
        TestDataFactory.create_customer(name='Bala Stores', phone='9000000002')
        response = self.client.get('/api/v1/customers/', {'search': 'asha'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Asha Traders')

    def test_delete_is_soft(self):
        customer = TestDataFactory.create_customer()
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        self.assertTrue(Customer.all_objects.get(pk=customer.pk).is_deleted)
        response = self.client.get(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.data['count'], 0)

    def test_deleted_customer_cannot_place_orders(self):
        customer = TestDataFactory.create_customer()
        product = TestDataFactory.create_product()
        customer.soft_delete()
        data = {'customer': customer.id, 'items': [{'product': product.id, 'quantity': 1}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
