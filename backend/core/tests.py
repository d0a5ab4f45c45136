"""
Test suite for core utilities
Tests: audit logging, soft delete, error mapping, choice/date parsing and auth endpoints
"""
from datetime import date
from django.db import DatabaseError
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIRequestFactory
from rest_framework.request import Request
from backend.core.exceptions import (
    IllegalState, InvalidArgument, NotFound, api_exception_handler
)
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import (
    create_audit_log, get_page_params, normalize_choice, parse_date_bound
)
from backend.parties.models import Customer


class AuditLogTests(TestCase):
    """Test create_audit_log helper"""

    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_create_audit_log(self):
        entry = create_audit_log(
            action='order_create',
            model_name='Order',
            object_id=42,
            user=self.user,
            object_reference='ORD-1',
            changes={'total_amount': '25.00'}
        )
        self.assertIsNotNone(entry)
        self.assertEqual(entry.object_id, '42')
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.changes['total_amount'], '25.00')

    def test_missing_fields_skips_entry(self):
        """Entries without an action are not written"""
        self.assertIsNone(create_audit_log(model_name='Order', object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_ip_address_from_forwarded_header(self):
        request = APIRequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.5, 10.0.0.1')
        request.user = self.user
        entry = create_audit_log(request=request, action='create', model_name='Customer', object_id=1)
        self.assertEqual(entry.ip_address, '10.0.0.5')
        self.assertEqual(entry.user, self.user)


class SoftDeleteTests(TestCase):
    """Soft-deleted rows disappear from the default manager only"""

    def test_soft_delete_hides_row(self):
        customer = TestDataFactory.create_customer()
        customer.soft_delete()

        self.assertFalse(Customer.objects.filter(pk=customer.pk).exists())
        stored = Customer.all_objects.get(pk=customer.pk)
        self.assertTrue(stored.is_deleted)
        self.assertIsNotNone(stored.deleted_at)

    def test_queryset_soft_delete(self):
        TestDataFactory.create_customer()
        TestDataFactory.create_customer()
        Customer.all_objects.all().soft_delete()
        self.assertEqual(Customer.objects.count(), 0)
        self.assertEqual(Customer.all_objects.count(), 2)


class ChoiceAndDateParsingTests(SimpleTestCase):
    CHOICES = [('pending', 'Pending'), ('in_progress', 'In Progress')]

    def test_normalize_choice_is_case_insensitive(self):
        self.assertEqual(normalize_choice('PENDING', self.CHOICES), 'pending')
        self.assertEqual(normalize_choice(' In_Progress ', self.CHOICES), 'in_progress')

    def test_normalize_choice_rejects_unknown(self):
        with self.assertRaises(InvalidArgument):
            normalize_choice('shipped', self.CHOICES, 'status')
        with self.assertRaises(InvalidArgument):
            normalize_choice(None, self.CHOICES, 'status')

    def test_date_bounds_cover_whole_day(self):
        start = parse_date_bound('2024-03-01')
        end = parse_date_bound('2024-03-01', end_of_day=True)
        self.assertTrue(timezone.is_aware(start))
        self.assertEqual(start.date(), date(2024, 3, 1))
        self.assertEqual((start.hour, start.minute), (0, 0))
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))

    def test_datetime_bound(self):
        bound = parse_date_bound('2024-03-01T10:30:00Z')
        self.assertEqual(bound.hour, 10)
        self.assertEqual(bound.minute, 30)

    def test_invalid_date_bound(self):
        with self.assertRaises(InvalidArgument):
            parse_date_bound('yesterday')
        with self.assertRaises(InvalidArgument):
            parse_date_bound('2024-13-45')


@override_settings(DEFAULT_PAGE_SIZE=20, MAX_PAGE_SIZE=100)
class PageParamsTests(SimpleTestCase):

    def _request(self, **params):
        return Request(APIRequestFactory().get('/', params))

    def test_defaults(self):
        self.assertEqual(get_page_params(self._request()), (1, 20))

    def test_size_and_limit(self):
        self.assertEqual(get_page_params(self._request(page=3, size=5)), (3, 5))
        self.assertEqual(get_page_params(self._request(limit=7)), (1, 7))

    def test_bounds_are_clamped(self):
        self.assertEqual(get_page_params(self._request(page=0, size=1000)), (1, 100))
        self.assertEqual(get_page_params(self._request(page='abc', size='x')), (1, 20))


class ExceptionHandlerTests(SimpleTestCase):
    """Domain errors map onto HTTP statuses with an error/message body"""

    def _context(self):
        return {'request': Request(APIRequestFactory().get('/api/v1/orders/')), 'view': None}

    def test_domain_error_statuses(self):
        cases = [
            (NotFound('Order not found with id: 9'), status.HTTP_404_NOT_FOUND, 'not_found'),
            (InvalidArgument('Payment amount exceeds order balance'), status.HTTP_400_BAD_REQUEST, 'invalid_argument'),
            (IllegalState('Order is already cancelled'), status.HTTP_409_CONFLICT, 'illegal_state'),
        ]
        for exc, expected_status, code in cases:
            response = api_exception_handler(exc, self._context())
            self.assertEqual(response.status_code, expected_status)
            self.assertEqual(response.data['error'], code)
            self.assertEqual(response.data['message'], str(exc.detail))

    def test_database_error_becomes_storage_failure(self):
        with self.assertLogs('backend.core.exceptions', level='ERROR'):
            response = api_exception_handler(DatabaseError('disk full'), self._context())
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'storage_failure')


class AuthAPITests(TestCase):
    """Test JWT login and the audit log endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(password='testpass123')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': self.user.username,
            'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], self.user.username)

    def test_audit_log_list_only_shows_own_entries(self):
        other = TestDataFactory.create_user()
        create_audit_log(action='create', model_name='Customer', object_id=1, user=self.user)
        create_audit_log(action='create', model_name='Customer', object_id=2, user=other)

        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['object_id'], '1')
