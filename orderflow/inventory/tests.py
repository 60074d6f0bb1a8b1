"""
Test suite for the raw-material ledger
Tests: IN/OUT/ADJUST movements, reference validation, daily counts, low stock and the inventory API
"""
from django.test import TestCase
from rest_framework import status

from orderflow.core.exceptions import InsufficientStock, NotFound, ValidationFailed
from orderflow.core.models import AuditLog
from orderflow.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderflow.inventory import services
from orderflow.inventory.models import InventoryStock, InventoryTxn
from orderflow.inventory.services import inventory_ledger
from orderflow.ledger.models import TxnKind
from orderflow.locations.models import InventoryLocation


class InventoryServiceTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.item = TestDataFactory.create_item(sku='RESIN-55', min_stock=10)
        self.location = TestDataFactory.create_location(name='Main Warehouse')

    def test_stock_in_and_out(self):
        movement = services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 12, actor=self.admin)
        self.assertEqual(movement.row.quantity, 12)
        movement = services.move_inventory(self.item.pk, self.location.pk, 'OUT', 5, actor=self.admin)
        self.assertEqual(movement.row.quantity, 7)
        self.assertEqual(movement.txn.delta, -5)
        self.assertEqual(InventoryStock.objects.count(), 1)
        self.assertEqual(inventory_ledger.txn_balance(movement.row), 7)
        self.assertEqual(AuditLog.objects.filter(action='stock_move', model_name='InventoryStock').count(), 2)

    def test_out_beyond_on_hand_rejected(self):
        services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 3)
        with self.assertRaises(InsufficientStock) as ctx:
            services.move_inventory(self.item.pk, self.location.pk, TxnKind.OUT, 4)
        self.assertEqual(ctx.exception.current_quantity, 3)
        stock = InventoryStock.objects.get(item=self.item, location=self.location)
        self.assertEqual(stock.quantity, 3)
        self.assertEqual(InventoryTxn.objects.filter(stock=stock).count(), 1)

    def test_finished_goods_kinds_rejected(self):
        with self.assertRaises(ValidationFailed):
            services.move_inventory(self.item.pk, self.location.pk, TxnKind.SHIP, 1)

    def test_references_must_exist_and_be_active(self):
        with self.assertRaises(NotFound):
            services.move_inventory(999999, self.location.pk, TxnKind.IN, 1)
        with self.assertRaises(NotFound):
            services.move_inventory(self.item.pk, 999999, TxnKind.IN, 1)
        inactive_item = TestDataFactory.create_item(is_active=False)
        with self.assertRaises(ValidationFailed):
            services.move_inventory(inactive_item.pk, self.location.pk, TxnKind.IN, 1)
        closed = TestDataFactory.create_location(is_active=False)
        with self.assertRaises(ValidationFailed):
            services.move_inventory(self.item.pk, closed.pk, TxnKind.IN, 1)
        with self.assertRaises(NotFound):
            services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 1, order_id=999999)
        self.assertEqual(InventoryTxn.objects.count(), 0)

    def test_consumption_linked_to_order(self):
        order = TestDataFactory.create_order()
        services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 20)
        movement = services.move_inventory(self.item.pk, self.location.pk, TxnKind.OUT, 8, order_id=order.pk)
        self.assertEqual(movement.txn.order, order)
        self.assertEqual(order.inventory_txns.count(), 1)

    def test_count_adjust_sets_absolute_quantity(self):
        services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 10)
        movement = services.count_adjust(self.item.pk, self.location.pk, 6, actor=self.admin)
        self.assertEqual(movement.row.quantity, 6)
        self.assertEqual(movement.txn.kind, TxnKind.ADJUST)
        self.assertEqual(movement.txn.delta, -4)
        self.assertEqual(movement.txn.notes, 'Daily count')
        self.assertTrue(AuditLog.objects.filter(action='stock_count').exists())

    def test_count_adjust_unchanged_writes_no_txn(self):
        services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 4)
        movement = services.count_adjust(self.item.pk, self.location.pk, 4)
        self.assertIsNone(movement.txn)
        self.assertEqual(InventoryTxn.objects.count(), 1)

    def test_count_adjust_creates_row(self):
        movement = services.count_adjust(self.item.pk, self.location.pk, 9)
        self.assertEqual(movement.row.quantity, 9)
        self.assertEqual(movement.txn.delta, 9)

    def test_count_adjust_rejects_negative(self):
        with self.assertRaises(ValidationFailed):
            services.count_adjust(self.item.pk, self.location.pk, -1)

    def test_low_stock(self):
        services.move_inventory(self.item.pk, self.location.pk, TxnKind.IN, 4)
        plenty = TestDataFactory.create_item(min_stock=1)
        services.move_inventory(plenty.pk, self.location.pk, TxnKind.IN, 5)
        self.assertEqual([s.item_id for s in services.low_stock()], [self.item.pk])

    def test_factory_location_keeps_factory_only_for_factory_type(self):
        factory = TestDataFactory.create_factory()
        location = TestDataFactory.create_location(location_type=InventoryLocation.TYPE_WAREHOUSE, factory=factory)
        self.assertIsNone(location.factory)
        location = TestDataFactory.create_location(location_type=InventoryLocation.TYPE_FACTORY, factory=factory)
        self.assertEqual(location.factory, factory)


class InventoryAPITests(TestCase):
    """Inventory API"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.item = TestDataFactory.create_item(sku='GEL-1')
        self.location = TestDataFactory.create_location()

    def _move(self, kind, quantity, **extra):
        data = {'item': self.item.id, 'location': self.location.id, 'kind': kind, 'quantity': quantity}
        data.update(extra)
        return self.client.post('/api/v1/inventory/txns/', data, format='json')

    def test_create_item_normalizes_sku(self):
        response = self.client.post('/api/v1/inventory/items/', {'sku': ' pipe-2in ', 'name': '2in pipe'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sku'], 'PIPE-2IN')
        self.assertEqual(response.data['unit'], 'ea')

    def test_movement_and_overdraw(self):
        response = self._move('IN', 5)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock']['quantity'], 5)
        response = self._move('OUT', 6)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['current_quantity'], 5)
        self.assertEqual(response.data['delta'], -6)

    def test_inactive_item_rejected(self):
        self.item.is_active = False
        self.item.save()
        response = self._move('IN', 1)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'item')

    def test_unknown_location(self):
        response = self._move('IN', 1, location=999999)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_txn_list_filters_and_limit(self):
        other = TestDataFactory.create_item()
        self._move('IN', 5)
        self._move('OUT', 1)
        self.client.post(
            '/api/v1/inventory/txns/',
            {'item': other.id, 'location': self.location.id, 'kind': 'IN', 'quantity': 2},
            format='json',
        )
        response = self.client.get('/api/v1/inventory/txns/', {'item': self.item.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['kind'] for t in response.data], ['OUT', 'IN'])
        response = self.client.get('/api/v1/inventory/txns/', {'kind': 'IN'})
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/inventory/txns/', {'limit': 1})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['item'], other.id)

    def test_daily_count(self):
        self._move('IN', 10)
        response = self.client.post(
            '/api/v1/inventory/adjust/',
            {'item': self.item.id, 'location': self.location.id, 'quantity': 7},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['changed'])
        self.assertEqual(response.data['txn']['delta'], -3)
        response = self.client.post(
            '/api/v1/inventory/adjust/',
            {'item': self.item.id, 'location': self.location.id, 'quantity': 7},
            format='json',
        )
        self.assertFalse(response.data['changed'])
        self.assertIsNone(response.data['txn'])

    def test_stock_list_low_filter(self):
        self.item.min_stock = 10
        self.item.save()
        self._move('IN', 3)
        response = self.client.get('/api/v1/inventory/stocks/', {'low': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]['is_low'])
        response = self.client.get('/api/v1/inventory/stocks/', {'search': 'gel'})
        self.assertEqual(len(response.data), 1)
