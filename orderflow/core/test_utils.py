"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from orderflow.catalog.models import ProductModel, Color
from orderflow.inventory.models import InventoryItem
from orderflow.locations.models import Factory, InventoryLocation
from orderflow.orders.flow import INITIAL_STATUS
from orderflow.orders.models import Order, OrderHistory, OrderMedia
from orderflow.parties.models import Dealer
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=User.ROLE_DEALER, dealer=None):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            dealer=dealer,
        )

    @staticmethod
    def create_admin(username=None):
        return TestDataFactory.create_user(username=username, role=User.ROLE_ADMIN)

    @staticmethod
    def create_dealer(name=None, email=None, with_user=False):
        """Create a test dealer; with_user also returns a linked dealer login"""
        if not name:
            name = f'Dealer_{TestDataFactory.random_string(6)}'
        dealer = Dealer.objects.create(
            name=name,
            email=email or f'{name.lower()}@test.com',
            phone='1234567890',
            is_approved=True,
        )
        if with_user:
            return dealer, TestDataFactory.create_user(dealer=dealer)
        return dealer

    @staticmethod
    def create_factory(name=None, is_active=True):
        if not name:
            name = f'Factory_{TestDataFactory.random_string(6)}'
        return Factory.objects.create(name=name, city='Test City', state='TX', is_active=is_active)

    @staticmethod
    def create_location(name=None, location_type=InventoryLocation.TYPE_WAREHOUSE, factory=None, is_active=True):
        if not name:
            name = f'Location_{TestDataFactory.random_string(6)}'
        return InventoryLocation.objects.create(
            name=name,
            location_type=location_type,
            factory=factory,
            is_active=is_active,
        )

    @staticmethod
    def create_product_model(name=None):
        if not name:
            name = f'Model_{TestDataFactory.random_string(6)}'
        return ProductModel.objects.create(name=name, length_ft='30.00', width_ft='14.00', depth_ft='6.50')

    @staticmethod
    def create_color(name=None):
        if not name:
            name = f'Color_{TestDataFactory.random_string(6)}'
        return Color.objects.create(name=name)

    @staticmethod
    def create_item(sku=None, name=None, min_stock=0, is_active=True):
        """Create a raw-material item"""
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8).upper()}'
        return InventoryItem.objects.create(
            sku=sku,
            name=name or f'Item {sku}',
            min_stock=min_stock,
            is_active=is_active,
        )

    @staticmethod
    def create_order(dealer=None, product_model=None, status=None, **fields):
        """Create a test order with its intake history row.

        `status` positions the order directly (bypassing the gate) for tests
        that start mid-lifecycle.
        """
        if not dealer:
            dealer = TestDataFactory.create_dealer()
        if not product_model:
            product_model = TestDataFactory.create_product_model()
        fields.setdefault('delivery_address', '1 Test Lane, Austin TX')
        order = Order.objects.create(dealer=dealer, product_model=product_model, **fields)
        OrderHistory.objects.create(order=order, status=INITIAL_STATUS, comment='Order submitted')
        if status and status != INITIAL_STATUS:
            Order.objects.filter(pk=order.pk).update(status=status)
            order = Order.objects.get(pk=order.pk)
        return order

    @staticmethod
    def attach_docs(order, *doc_types, visible_to_dealer=True):
        """Attach one media row per document kind"""
        return [
            OrderMedia.objects.create(
                order=order,
                file_url=f'https://files.test/{order.pk}/{doc_type.lower()}.pdf',
                doc_type=doc_type,
                media_type='proof',
                visible_to_dealer=visible_to_dealer,
            )
            for doc_type in doc_types
        ]


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
