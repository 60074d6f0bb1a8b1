"""
Test suite for core: auth boundary, audit log, error payloads and the reference-data endpoints
"""
from unittest import mock

from django.test import TestCase, RequestFactory
from rest_framework import status

from orderflow.core.exceptions import Conflict, InsufficientStock, NotFound, ValidationFailed
from orderflow.core.models import AuditLog, User
from orderflow.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderflow.core.utils import create_audit_log, get_client_ip, parse_bool, parse_limit
from orderflow.catalog.models import Color


class UtilsTests(TestCase):

    def test_parse_limit_clamps(self):
        self.assertEqual(parse_limit(None, 50, 200), 50)
        self.assertEqual(parse_limit('abc', 50, 200), 50)
        self.assertEqual(parse_limit('0', 50, 200), 1)
        self.assertEqual(parse_limit('1000', 50, 200), 200)
        self.assertEqual(parse_limit(25, 50, 200), 25)

    def test_parse_bool(self):
        self.assertTrue(parse_bool('Yes'))
        self.assertFalse(parse_bool('off'))
        self.assertFalse(parse_bool('maybe', default=False))
        self.assertTrue(parse_bool(None))

    def test_client_ip_prefers_forwarded_for(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.5, 10.0.0.1', REMOTE_ADDR='127.0.0.1')
        self.assertEqual(get_client_ip(request), '10.0.0.5')
        self.assertIsNone(get_client_ip(None))

    def test_audit_log_never_raises(self):
        user = TestDataFactory.create_admin()
        with mock.patch('orderflow.core.utils.AuditLog.objects.create', side_effect=RuntimeError('db down')):
            self.assertIsNone(create_audit_log(user=user, action='stock_move', model_name='PoolStock', object_id=1))

    def test_audit_log_skips_incomplete_entries(self):
        self.assertIsNone(create_audit_log(action='stock_move', model_name='PoolStock'))
        self.assertEqual(AuditLog.objects.count(), 0)


class ExceptionPayloadTests(TestCase):

    def test_payloads_carry_code_and_detail(self):
        self.assertEqual(NotFound('Order 3 not found').as_dict(), {'error': 'Order 3 not found', 'code': 'not_found'})
        payload = ValidationFailed('bad', field='quantity').as_dict()
        self.assertEqual(payload['field'], 'quantity')
        self.assertEqual(ValidationFailed.status_code, 400)

    def test_insufficient_stock(self):
        exc = InsufficientStock(current_quantity=2, delta=-5)
        self.assertEqual(exc.status_code, 409)
        self.assertEqual(exc.as_dict()['current_quantity'], 2)
        self.assertEqual(exc.as_dict()['delta'], -5)

    def test_conflict_default_message(self):
        self.assertEqual(Conflict().as_dict()['code'], 'conflict')


class AuthTests(TestCase):

    def setUp(self):
        self.dealer, self.user = TestDataFactory.create_dealer(with_user=True)
        self.user.set_password('s3cret-pass')
        self.user.save()

    def test_login_returns_tokens(self):
        response = AuthenticatedAPIClient().post(
            '/api/v1/auth/login/', {'username': self.user.username, 'password': 's3cret-pass'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_login_rejects_bad_password(self):
        response = AuthenticatedAPIClient().post(
            '/api/v1/auth/login/', {'username': self.user.username, 'password': 'wrong'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_reports_role_and_dealer(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], User.ROLE_DEALER)
        self.assertEqual(response.data['dealer'], self.dealer.id)

    def test_admin_role(self):
        admin = TestDataFactory.create_admin()
        superuser = User.objects.create_superuser(username='root', email='root@test.com', password='x')
        self.assertTrue(admin.is_admin_role)
        self.assertTrue(superuser.is_admin_role)
        self.assertFalse(self.user.is_admin_role)


class AuditLogAPITests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_filters(self):
        create_audit_log(user=self.admin, action='stock_move', model_name='PoolStock', object_id=1)
        create_audit_log(user=self.admin, action='order_create', model_name='Order', object_id=2)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'order_create'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['user'], self.admin.username)

    def test_dealer_forbidden(self):
        _, user = TestDataFactory.create_dealer(with_user=True)
        response = AuthenticatedAPIClient().authenticate_user(user).get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ReferenceDataAPITests(TestCase):
    """Factories, locations, catalog and dealers"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)
        _, dealer_user = TestDataFactory.create_dealer(with_user=True)
        self.dealer_client = AuthenticatedAPIClient().authenticate_user(dealer_user)

    def test_factory_names_are_unique(self):
        response = self.admin_client.post('/api/v1/factories/', {'name': 'North Plant'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.admin_client.post('/api/v1/factories/', {'name': 'North Plant'}, format='json')
        self.assertIn(response.status_code, [status.HTTP_400_BAD_REQUEST, status.HTTP_409_CONFLICT])

    def test_inventory_location(self):
        response = self.admin_client.post(
            '/api/v1/inventory/locations/', {'name': 'Yard', 'location_type': 'WAREHOUSE'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.admin_client.get('/api/v1/inventory/locations/', {'type': 'WAREHOUSE'})
        self.assertEqual(len(response.data), 1)

    def test_dealers_see_only_active_catalog(self):
        TestDataFactory.create_color(name='Arctic White')
        Color.objects.create(name='Retired Blue', is_active=False)
        response = self.dealer_client.get('/api/v1/catalog/colors/')
        self.assertEqual([c['name'] for c in response.data], ['Arctic White'])
        response = self.admin_client.get('/api/v1/catalog/colors/')
        self.assertEqual(len(response.data), 2)

    def test_dealer_cannot_create_catalog(self):
        response = self.dealer_client.post('/api/v1/catalog/product-models/', {'name': 'Lagoon 30'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.admin_client.post('/api/v1/catalog/product-models/', {'name': 'Lagoon 30'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_dealer_registration_and_approval(self):
        response = self.admin_client.post('/api/v1/dealers/', {'name': 'Blue Pools LLC'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        dealer_id = response.data['id']
        response = self.admin_client.patch(f'/api/v1/dealers/{dealer_id}/', {'is_approved': True}, format='json')
        self.assertTrue(response.data['is_approved'])
        response = self.admin_client.get('/api/v1/dealers/', {'approved': 'false'})
        self.assertNotIn(dealer_id, [d['id'] for d in response.data])
