"""
Test suite for the finished-goods ledger
Tests: movements, insufficient stock, reconciliation, row upsert, summary and the pool stock API
"""
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, transaction
from django.test import TestCase
from io import StringIO
from rest_framework import status

from orderflow.core.audit import ImmutableRecordError
from orderflow.core.exceptions import Conflict, InsufficientStock, NotFound, ValidationFailed
from orderflow.core.models import AuditLog
from orderflow.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderflow.ledger.models import TxnKind
from orderflow.ledger.services import signed_delta
from orderflow.pool_stock import services
from orderflow.pool_stock.models import PoolStock, PoolStockTxn
from orderflow.pool_stock.services import pool_stock_ledger


class SignedDeltaTests(TestCase):

    def test_credit_and_debit_kinds(self):
        self.assertEqual(signed_delta(TxnKind.ADD, 4), 4)
        self.assertEqual(signed_delta('RELEASE', 2), 2)
        self.assertEqual(signed_delta(TxnKind.SHIP, 3), -3)
        self.assertEqual(signed_delta(TxnKind.RESERVE, 1), -1)

    def test_adjust_is_signed(self):
        self.assertEqual(signed_delta(TxnKind.ADJUST, -5), -5)
        self.assertEqual(signed_delta(TxnKind.ADJUST, 5), 5)

    def test_invalid_amounts(self):
        for kind, quantity in [(TxnKind.ADD, 0), (TxnKind.SHIP, -2), (TxnKind.ADJUST, 0), (TxnKind.ADD, 1.5),
                               (TxnKind.ADD, True)]:
            with self.assertRaises(ValidationFailed):
                signed_delta(kind, quantity)

    def test_unknown_kind(self):
        with self.assertRaises(ValidationFailed):
            signed_delta('TELEPORT', 1)


class PoolStockLedgerTests(TestCase):
    """Conditional-update ledger semantics"""

    def setUp(self):
        self.factory = TestDataFactory.create_factory()
        self.product_model = TestDataFactory.create_product_model()
        self.color = TestDataFactory.create_color()
        self.key = {
            'factory': self.factory,
            'product_model': self.product_model,
            'color': self.color,
            'condition': PoolStock.CONDITION_READY,
        }

    def _stock(self, quantity):
        movement = pool_stock_ledger.apply(TxnKind.ADD, quantity, key=self.key)
        return movement.row

    def assertReconciles(self, row):
        row.refresh_from_db()
        self.assertEqual(pool_stock_ledger.txn_balance(row), row.quantity)
        self.assertGreaterEqual(row.quantity, 0)

    def test_ship_reduces_quantity_with_one_txn(self):
        row = self._stock(5)
        movement = pool_stock_ledger.apply(TxnKind.SHIP, 3, row=row)
        self.assertEqual(movement.row.quantity, 2)
        self.assertEqual(movement.txn.kind, TxnKind.SHIP)
        self.assertEqual(movement.txn.quantity, 3)
        self.assertEqual(movement.txn.delta, -3)
        self.assertEqual(PoolStockTxn.objects.filter(stock=row, kind=TxnKind.SHIP).count(), 1)
        self.assertReconciles(row)

    def test_overdraw_rejected_and_nothing_written(self):
        row = self._stock(5)
        pool_stock_ledger.apply(TxnKind.SHIP, 3, row=row)
        txns_before = PoolStockTxn.objects.filter(stock=row).count()

        with self.assertRaises(InsufficientStock) as ctx:
            pool_stock_ledger.apply(TxnKind.SHIP, 5, row=row)
        self.assertEqual(ctx.exception.current_quantity, 2)
        self.assertEqual(ctx.exception.delta, -5)

        row.refresh_from_db()
        self.assertEqual(row.quantity, 2)
        self.assertEqual(PoolStockTxn.objects.filter(stock=row).count(), txns_before)
        self.assertReconciles(row)

    def test_ship_before_add_fails_then_succeeds(self):
        # SHIP attempted first against an empty row
        with self.assertRaises(InsufficientStock) as ctx:
            pool_stock_ledger.apply(TxnKind.SHIP, 4, key=self.key)
        self.assertEqual(ctx.exception.current_quantity, 0)
        # the failed unit rolled back the row it created
        self.assertFalse(PoolStock.objects.filter(factory=self.factory).exists())

        row = pool_stock_ledger.apply(TxnKind.ADD, 10, key=self.key).row
        self.assertEqual(row.quantity, 10)
        row = pool_stock_ledger.apply(TxnKind.SHIP, 4, key=self.key).row
        self.assertEqual(row.quantity, 6)
        self.assertReconciles(row)

    def test_creation_race_joins_winner_row(self):
        winner = self._stock(3)
        real_get_or_create = PoolStock.objects.get_or_create
        calls = []

        def lose_once(*args, **kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                raise IntegrityError('duplicate key value violates uniq_pool_stock_key')
            return real_get_or_create(*args, **kwargs)

        with mock.patch.object(PoolStock.objects, 'get_or_create', side_effect=lose_once):
            movement = pool_stock_ledger.apply(TxnKind.ADD, 2, key=self.key)

        self.assertEqual(len(calls), 2)
        self.assertEqual(movement.row.pk, winner.pk)
        self.assertEqual(movement.row.quantity, 5)
        self.assertEqual(PoolStock.objects.filter(factory=self.factory).count(), 1)
        self.assertReconciles(movement.row)

    def test_creation_race_lost_twice_raises_conflict(self):
        with mock.patch.object(PoolStock.objects, 'get_or_create', side_effect=IntegrityError('duplicate key')) as patched:
            with self.assertRaises(Conflict) as ctx:
                pool_stock_ledger.apply(TxnKind.ADD, 2, key=self.key)
        self.assertEqual(patched.call_count, 2)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.detail['key']['condition'], PoolStock.CONDITION_READY)
        self.assertFalse(PoolStockTxn.objects.exists())

    def test_add_then_ship(self):
        row = pool_stock_ledger.apply(TxnKind.ADD, 10, key=self.key).row
        row = pool_stock_ledger.apply(TxnKind.SHIP, 4, key=self.key).row
        self.assertEqual(row.quantity, 6)
        self.assertEqual(PoolStock.objects.filter(factory=self.factory).count(), 1)

    def test_competing_debits_never_go_negative(self):
        row = self._stock(5)
        # two callers that both read quantity 5 before debiting
        stale_a = PoolStock.objects.get(pk=row.pk)
        stale_b = PoolStock.objects.get(pk=row.pk)
        pool_stock_ledger.apply(TxnKind.RESERVE, 3, row=stale_a)
        with self.assertRaises(InsufficientStock):
            pool_stock_ledger.apply(TxnKind.RESERVE, 3, row=stale_b)
        pool_stock_ledger.apply(TxnKind.RESERVE, 2, row=stale_b)
        row.refresh_from_db()
        self.assertEqual(row.quantity, 0)
        self.assertReconciles(row)

    def test_exact_debit_to_zero(self):
        row = self._stock(3)
        movement = pool_stock_ledger.apply(TxnKind.SHIP, 3, row=row)
        self.assertEqual(movement.row.quantity, 0)

    def test_adjust_down_respects_floor(self):
        row = self._stock(2)
        with self.assertRaises(InsufficientStock):
            pool_stock_ledger.apply(TxnKind.ADJUST, -3, row=row)
        movement = pool_stock_ledger.apply(TxnKind.ADJUST, -2, row=row)
        self.assertEqual(movement.row.quantity, 0)
        self.assertEqual(movement.txn.quantity, 2)
        self.assertEqual(movement.txn.delta, -2)

    def test_kind_outside_ledger_rejected(self):
        with self.assertRaises(ValidationFailed):
            pool_stock_ledger.apply(TxnKind.IN, 1, key=self.key)

    def test_release_and_link_order(self):
        order = TestDataFactory.create_order(product_model=self.product_model)
        row = self._stock(4)
        pool_stock_ledger.apply(TxnKind.RESERVE, 1, row=row, order=order)
        movement = pool_stock_ledger.apply(TxnKind.RELEASE, 1, row=row, order=order)
        self.assertEqual(movement.row.quantity, 4)
        self.assertEqual(order.pool_stock_txns.count(), 2)

    def test_existing_key_merges_into_one_row(self):
        first = pool_stock_ledger.apply(TxnKind.ADD, 1, key=self.key).row
        second = pool_stock_ledger.apply(TxnKind.ADD, 2, key=dict(self.key)).row
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.quantity, 3)

    def test_colorless_rows_are_unique_too(self):
        key = dict(self.key, color=None)
        first, created = pool_stock_ledger.get_or_create_row(key)
        again, created_again = pool_stock_ledger.get_or_create_row(key)
        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.pk, again.pk)
        self.assertEqual(first.color_key, 'NONE')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PoolStock.objects.create(factory=self.factory, product_model=self.product_model)

    def test_key_must_be_complete(self):
        with self.assertRaises(ValidationFailed):
            pool_stock_ledger.get_or_create_row({'factory': self.factory})

    def test_unknown_row(self):
        with self.assertRaises(NotFound):
            pool_stock_ledger.get_row(999999)

    def test_txns_are_append_only(self):
        row = self._stock(1)
        txn = row.txns.first()
        txn.notes = 'edited'
        with self.assertRaises(ImmutableRecordError):
            txn.save()
        with self.assertRaises(ImmutableRecordError):
            txn.delete()

    def test_recent_txns_newest_first(self):
        row = self._stock(5)
        pool_stock_ledger.apply(TxnKind.RESERVE, 1, row=row)
        pool_stock_ledger.apply(TxnKind.SHIP, 1, row=row)
        kinds = [t.kind for t in pool_stock_ledger.recent_txns(row=row)]
        self.assertEqual(kinds, ['SHIP', 'RESERVE', 'ADD'])
        self.assertEqual(len(pool_stock_ledger.recent_txns(row=row, kind=TxnKind.SHIP)), 1)
        self.assertEqual(len(pool_stock_ledger.recent_txns(factory=self.factory, limit=2)), 2)

    def test_set_quantity_writes_one_adjust(self):
        row = self._stock(7)
        movement = pool_stock_ledger.set_quantity(self.key, 4)
        self.assertEqual(movement.row.quantity, 4)
        self.assertEqual(movement.txn.kind, TxnKind.ADJUST)
        self.assertEqual(movement.txn.delta, -3)
        unchanged = pool_stock_ledger.set_quantity(self.key, 4)
        self.assertIsNone(unchanged.txn)
        self.assertReconciles(row)


class PoolStockServiceTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.factory = TestDataFactory.create_factory(name='Alpha Plant')
        self.product_model = TestDataFactory.create_product_model()

    def test_receive_creates_row_and_add_txn(self):
        movement, created = services.receive_stock(
            self.factory.pk, self.product_model.pk, quantity=3, eta='2026-12-01', notes='First batch',
            actor=self.admin,
        )
        self.assertTrue(created)
        self.assertEqual(movement.row.quantity, 3)
        self.assertEqual(movement.row.condition, PoolStock.CONDITION_READY)
        self.assertEqual(movement.txn.kind, TxnKind.ADD)
        self.assertEqual(movement.txn.actor, self.admin)
        self.assertTrue(AuditLog.objects.filter(action='stock_move', model_name='PoolStock').exists())

    def test_receive_zero_only_registers_row(self):
        movement, created = services.receive_stock(self.factory.pk, self.product_model.pk, condition='in_production')
        self.assertTrue(created)
        self.assertIsNone(movement.txn)
        self.assertEqual(movement.row.condition, PoolStock.CONDITION_IN_PRODUCTION)
        self.assertEqual(PoolStockTxn.objects.count(), 0)

    def test_receive_again_merges_and_updates_notes(self):
        services.receive_stock(self.factory.pk, self.product_model.pk, quantity=2)
        movement, created = services.receive_stock(self.factory.pk, self.product_model.pk, quantity=1, notes='Restock')
        self.assertFalse(created)
        self.assertEqual(movement.row.quantity, 3)
        self.assertEqual(movement.row.notes, 'Restock')
        self.assertEqual(PoolStock.objects.count(), 1)

    def test_receive_validates_references(self):
        with self.assertRaises(NotFound):
            services.receive_stock(999999, self.product_model.pk, quantity=1)
        with self.assertRaises(NotFound):
            services.receive_stock(self.factory.pk, self.product_model.pk, color_id=999999, quantity=1)
        with self.assertRaises(ValidationFailed):
            services.receive_stock(self.factory.pk, self.product_model.pk, condition='LOST', quantity=1)
        with self.assertRaises(ValidationFailed):
            services.receive_stock(self.factory.pk, self.product_model.pk, quantity=-1)

    def test_move_links_order(self):
        movement, _ = services.receive_stock(self.factory.pk, self.product_model.pk, quantity=2)
        order = TestDataFactory.create_order(product_model=self.product_model)
        moved = services.move_pool_stock(movement.row.pk, TxnKind.SHIP, 1, order_id=order.pk)
        self.assertEqual(moved.txn.order, order)
        with self.assertRaises(NotFound):
            services.move_pool_stock(movement.row.pk, TxnKind.SHIP, 1, order_id=999999)

    def test_summary_totals_per_factory_and_condition(self):
        other = TestDataFactory.create_factory(name='Beta Plant')
        services.receive_stock(self.factory.pk, self.product_model.pk, quantity=4)
        services.receive_stock(self.factory.pk, self.product_model.pk, condition='DAMAGED', quantity=1)
        services.receive_stock(other.pk, self.product_model.pk, condition='RESERVED', quantity=2)

        summary = {entry['factory_name']: entry for entry in services.summary()}
        self.assertEqual(summary['Alpha Plant']['totals']['READY'], 4)
        self.assertEqual(summary['Alpha Plant']['totals']['DAMAGED'], 1)
        self.assertEqual(summary['Alpha Plant']['totals']['RESERVED'], 0)
        self.assertEqual(summary['Alpha Plant']['total'], 5)
        self.assertEqual(summary['Beta Plant']['totals']['RESERVED'], 2)


class LedgerSyncCommandTests(TestCase):

    def setUp(self):
        factory = TestDataFactory.create_factory()
        product_model = TestDataFactory.create_product_model()
        self.movement, _ = services.receive_stock(factory.pk, product_model.pk, quantity=5)

    def test_clean_ledgers(self):
        out = StringIO()
        call_command('check_ledger_sync', '--strict', stdout=out)
        self.assertIn('All ledgers reconcile', out.getvalue())

    def test_reports_drift(self):
        PoolStock.objects.filter(pk=self.movement.row.pk).update(quantity=9)
        out = StringIO()
        call_command('check_ledger_sync', stdout=out)
        self.assertIn('txn sum 5', out.getvalue())
        with self.assertRaises(CommandError):
            call_command('check_ledger_sync', '--strict', '--ledger', 'pool-stock', stdout=StringIO())


class PoolStockAPITests(TestCase):
    """Pool stock API"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.factory = TestDataFactory.create_factory()
        self.product_model = TestDataFactory.create_product_model()
        self.color = TestDataFactory.create_color()

    def _receive(self, quantity=5, **extra):
        data = {
            'factory': self.factory.id,
            'product_model': self.product_model.id,
            'color': self.color.id,
            'quantity': quantity,
        }
        data.update(extra)
        return self.client.post('/api/v1/pool-stock/', data, format='json')

    def test_dealer_forbidden(self):
        _, dealer_user = TestDataFactory.create_dealer(with_user=True)
        client = AuthenticatedAPIClient().authenticate_user(dealer_user)
        response = client.get('/api/v1/pool-stock/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_receive_then_merge(self):
        response = self._receive(5)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock']['quantity'], 5)
        self.assertEqual(response.data['txn']['kind'], 'ADD')
        response = self._receive(2)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock']['quantity'], 7)

    def test_list_hides_empty_rows(self):
        self._receive(0, condition='IN_PRODUCTION')
        self._receive(3)
        response = self.client.get('/api/v1/pool-stock/')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/pool-stock/', {'include_zero': 'true'})
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/pool-stock/', {'include_zero': 'true', 'condition': 'READY'})
        self.assertEqual(len(response.data), 1)

    def test_ship_and_overdraw(self):
        stock_id = self._receive(5).data['stock']['id']
        response = self.client.post(f'/api/v1/pool-stock/{stock_id}/txns/', {'kind': 'SHIP', 'quantity': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock']['quantity'], 2)
        self.assertEqual(response.data['txn']['delta'], -3)

        response = self.client.post(f'/api/v1/pool-stock/{stock_id}/txns/', {'kind': 'SHIP', 'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertEqual(response.data['current_quantity'], 2)
        self.assertEqual(response.data['delta'], -5)

        response = self.client.get(f'/api/v1/pool-stock/{stock_id}/txns/')
        self.assertEqual([t['kind'] for t in response.data], ['SHIP', 'ADD'])

    def test_invalid_movement_kind(self):
        stock_id = self._receive(1).data['stock']['id']
        response = self.client.post(f'/api/v1/pool-stock/{stock_id}/txns/', {'kind': 'OUT', 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_row(self):
        response = self.client.get('/api/v1/pool-stock/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.post('/api/v1/pool-stock/999999/txns/', {'kind': 'SHIP', 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_summary(self):
        self._receive(4)
        response = self.client.get('/api/v1/pool-stock/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = next(e for e in response.data if e['factory'] == self.factory.id)
        self.assertEqual(entry['totals']['READY'], 4)

    def test_receive_conflict_after_two_lost_creations(self):
        with mock.patch.object(PoolStock.objects, 'get_or_create', side_effect=IntegrityError('duplicate key')):
            response = self._receive(5)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'conflict')
        self.assertEqual(response.data['key']['condition'], 'READY')
        self.assertFalse(PoolStock.objects.exists())

    def test_dealer_browses_ready_stock(self):
        self._receive(3)
        self._receive(4, condition='IN_PRODUCTION')
        self._receive(0, color=TestDataFactory.create_color().id)
        other_factory = TestDataFactory.create_factory()
        self._receive(2, factory=other_factory.id)

        _, dealer_user = TestDataFactory.create_dealer(with_user=True)
        client = AuthenticatedAPIClient().authenticate_user(dealer_user)
        response = client.get('/api/v1/pool-stock/in-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertTrue(all(item['condition'] == 'READY' and item['quantity'] > 0 for item in response.data))
        self.assertNotIn('notes', response.data[0])

        response = client.get('/api/v1/pool-stock/in-stock/', {'factory': self.factory.id, 'color': self.color.id})
        self.assertEqual([item['quantity'] for item in response.data], [3])
        response = client.get('/api/v1/pool-stock/in-stock/', {'condition': 'IN_PRODUCTION'})
        self.assertEqual(len(response.data), 2)

    def test_in_stock_requires_login(self):
        response = AuthenticatedAPIClient().get('/api/v1/pool-stock/in-stock/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
