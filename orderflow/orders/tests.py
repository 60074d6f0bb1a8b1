"""
Test suite for the order lifecycle
Tests: status flow, requirement checker, gated transitions, history, notifications and the orders API
"""
from unittest import mock

from django.contrib import admin
from django.core import mail
from django.test import RequestFactory, TestCase, override_settings
from rest_framework import status

from orderflow.core.audit import ImmutableRecordError, append_record
from orderflow.core.exceptions import NotFound, TransitionBlocked, ValidationFailed
from orderflow.core.models import AuditLog
from orderflow.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderflow.orders.admin import OrderMediaInline
from orderflow.orders import services
from orderflow.orders.checker import check_order_for_status, check_requirements
from orderflow.orders.flow import OrderStatus, flow_position, is_forward, is_terminal, parse_status
from orderflow.orders.models import Notification, Order, OrderHistory
from orderflow.orders.requirements import DocType, Requirements, requirements_for

IN_PRODUCTION_DOCS = (
    DocType.PROOF_OF_PAYMENT,
    DocType.QUOTE,
    DocType.INVOICE,
    DocType.BUILD_SHEET,
    DocType.POST_PRODUCTION_MEDIA,
)
PRE_SHIPPING_DOCS = (
    DocType.SHIPPING_CHECKLIST,
    DocType.PRE_SHIPPING_MEDIA,
    DocType.BILL_OF_LADING,
    DocType.PROOF_OF_FINAL_PAYMENT,
    DocType.PAID_INVOICE,
)


class FlowTests(TestCase):
    """Status parsing and lifecycle ordering"""

    def test_parse_status_normalizes(self):
        self.assertEqual(parse_status(' in_production '), OrderStatus.IN_PRODUCTION)
        self.assertIsNone(parse_status('SHIPPED'))
        self.assertIsNone(parse_status(None))

    def test_forward_is_by_lifecycle_position(self):
        self.assertTrue(is_forward(OrderStatus.PENDING_PAYMENT_APPROVAL, OrderStatus.PRE_SHIPPING))
        self.assertFalse(is_forward(OrderStatus.PRE_SHIPPING, OrderStatus.IN_PRODUCTION))
        self.assertFalse(is_forward(OrderStatus.IN_PRODUCTION, OrderStatus.IN_PRODUCTION))

    def test_canceled_is_outside_the_sequence(self):
        self.assertIsNone(flow_position(OrderStatus.CANCELED))
        self.assertFalse(is_forward(OrderStatus.IN_PRODUCTION, OrderStatus.CANCELED))

    def test_terminal_statuses(self):
        self.assertTrue(is_terminal(OrderStatus.COMPLETED))
        self.assertTrue(is_terminal(OrderStatus.CANCELED))
        self.assertFalse(is_terminal(OrderStatus.PRE_SHIPPING))

    def test_requirements_lookup(self):
        self.assertEqual(requirements_for(OrderStatus.IN_PRODUCTION).docs, IN_PRODUCTION_DOCS)
        self.assertEqual(requirements_for(OrderStatus.PRE_SHIPPING).docs, PRE_SHIPPING_DOCS)
        self.assertEqual(requirements_for(OrderStatus.COMPLETED).docs, ())
        self.assertEqual(requirements_for(OrderStatus.COMPLETED).fields, ('serial_number',))
        self.assertEqual(requirements_for(OrderStatus.CANCELED), Requirements(docs=(), fields=()))
        self.assertEqual(requirements_for(OrderStatus.PENDING_PAYMENT_APPROVAL), Requirements(docs=(), fields=()))


class CheckerTests(TestCase):
    """Presence checker, including the payment-proof equivalence"""

    def setUp(self):
        self.order = TestDataFactory.create_order()
        self.payment_and_quote = Requirements(docs=(DocType.PROOF_OF_PAYMENT, DocType.QUOTE), fields=())

    def test_no_attachments_reports_all_docs_missing_in_table_order(self):
        report = check_requirements(self.order, self.payment_and_quote)
        self.assertFalse(report.is_satisfied)
        self.assertEqual(list(report.missing_docs), ['PROOF_OF_PAYMENT', 'QUOTE'])
        self.assertEqual(report.missing_fields, ())

    def test_payment_proof_field_satisfies_document(self):
        Order.objects.filter(pk=self.order.pk).update(payment_proof_url='https://files.test/proof.pdf')
        TestDataFactory.attach_docs(self.order, DocType.QUOTE)
        report = check_requirements(self.order.pk, self.payment_and_quote)
        self.assertTrue(report.is_satisfied)
        self.assertEqual(list(report.satisfied_docs), ['PROOF_OF_PAYMENT', 'QUOTE'])

    def test_payment_proof_document_satisfies_field(self):
        TestDataFactory.attach_docs(self.order, DocType.PROOF_OF_PAYMENT)
        report = check_requirements(self.order, Requirements(docs=(), fields=('payment_proof_url',)))
        self.assertTrue(report.is_satisfied)

    def test_blank_field_counts_as_missing(self):
        Order.objects.filter(pk=self.order.pk).update(serial_number='   ')
        order = Order.objects.get(pk=self.order.pk)
        report = check_requirements(order, Requirements(docs=(), fields=('serial_number',)))
        self.assertEqual(report.missing_fields, ('serial_number',))

    def test_duplicate_attachments_count_once(self):
        TestDataFactory.attach_docs(self.order, DocType.QUOTE, DocType.QUOTE)
        report = check_requirements(self.order, Requirements(docs=(DocType.QUOTE,), fields=()))
        self.assertEqual(report.satisfied_docs, (DocType.QUOTE,))

    def test_empty_requirements_are_satisfied(self):
        report = check_order_for_status(self.order, OrderStatus.CANCELED)
        self.assertTrue(report.is_satisfied)

    def test_unknown_order(self):
        with self.assertRaises(NotFound):
            check_requirements(999999, self.payment_and_quote)

    def test_report_payload_has_labels(self):
        payload = check_order_for_status(self.order, OrderStatus.IN_PRODUCTION).as_dict()
        self.assertEqual(payload['target_status'], 'IN_PRODUCTION')
        self.assertIn('Proof of Payment', payload['missing_doc_labels'])
        self.assertEqual(payload['missing_field_labels'], ['Serial Number'])


class TransitionTests(TestCase):
    """Gated state machine"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.order = TestDataFactory.create_order()

    def _ready_for_production(self, order):
        Order.objects.filter(pk=order.pk).update(
            payment_proof_url='https://files.test/proof.pdf',
            serial_number='SN-1001',
        )
        TestDataFactory.attach_docs(order, DocType.QUOTE, DocType.INVOICE, DocType.BUILD_SHEET,
                                    DocType.POST_PRODUCTION_MEDIA)

    def test_forward_move_blocked_without_requirements(self):
        with self.assertRaises(TransitionBlocked) as ctx:
            services.request_transition(self.order.pk, OrderStatus.IN_PRODUCTION, actor=self.admin)
        report = ctx.exception.report
        self.assertEqual(report.missing_docs, IN_PRODUCTION_DOCS)
        self.assertEqual(report.missing_fields, ('serial_number',))

    def test_blocked_move_writes_nothing(self):
        with self.assertRaises(TransitionBlocked):
            services.request_transition(self.order.pk, OrderStatus.IN_PRODUCTION)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING_PAYMENT_APPROVAL)
        self.assertEqual(OrderHistory.objects.filter(order=self.order).count(), 1)

    def test_blocked_move_logs_plain_document_names(self):
        with self.assertLogs('orderflow.orders.services', level='WARNING') as logs:
            with self.assertRaises(TransitionBlocked):
                services.request_transition(self.order.pk, OrderStatus.IN_PRODUCTION)
        output = '\n'.join(logs.output)
        self.assertIn("'PROOF_OF_PAYMENT'", output)
        self.assertNotIn('DocType.', output)

    def test_forward_move_accepted_with_field_and_documents(self):
        self._ready_for_production(self.order)
        result = services.request_transition(self.order.pk, 'in_production', comment='Paid', actor=self.admin)

        self.assertEqual(result.previous_status, OrderStatus.PENDING_PAYMENT_APPROVAL)
        self.assertTrue(result.changed)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.IN_PRODUCTION)
        history = OrderHistory.objects.filter(order=self.order)
        self.assertEqual(history.count(), 2)
        self.assertEqual(history.last().status, OrderStatus.IN_PRODUCTION)
        self.assertEqual(history.last().comment, 'Paid')
        self.assertEqual(history.last().actor, self.admin)

    def test_gate_opens_when_last_requirement_arrives(self):
        Order.objects.filter(pk=self.order.pk).update(
            payment_proof_url='https://files.test/proof.pdf',
            serial_number='SN-1002',
        )
        remaining = [DocType.QUOTE, DocType.INVOICE, DocType.BUILD_SHEET, DocType.POST_PRODUCTION_MEDIA]
        for doc_type in remaining:
            with self.assertRaises(TransitionBlocked):
                services.request_transition(self.order.pk, OrderStatus.IN_PRODUCTION)
            TestDataFactory.attach_docs(self.order, doc_type)
        result = services.request_transition(self.order.pk, OrderStatus.IN_PRODUCTION)
        self.assertEqual(result.order.status, OrderStatus.IN_PRODUCTION)

    def test_default_history_comment(self):
        result = services.request_transition(self.order.pk, OrderStatus.CANCELED)
        self.assertEqual(result.history.comment, 'Status changed to Canceled')

    def test_cancel_is_never_gated(self):
        order = TestDataFactory.create_order(status=OrderStatus.IN_PRODUCTION)
        result = services.request_transition(order.pk, OrderStatus.CANCELED)
        self.assertEqual(result.order.status, OrderStatus.CANCELED)

    def test_backward_move_is_never_gated(self):
        order = TestDataFactory.create_order(status=OrderStatus.PRE_SHIPPING)
        result = services.request_transition(order.pk, OrderStatus.IN_PRODUCTION)
        self.assertEqual(result.order.status, OrderStatus.IN_PRODUCTION)

    def test_sideways_move_records_history(self):
        order = TestDataFactory.create_order(status=OrderStatus.IN_PRODUCTION)
        result = services.request_transition(order.pk, OrderStatus.IN_PRODUCTION, comment='Mold prepped')
        self.assertFalse(result.changed)
        self.assertEqual(OrderHistory.objects.filter(order=order).count(), 2)

    def test_pre_shipping_requires_its_own_documents_only(self):
        order = TestDataFactory.create_order(status=OrderStatus.IN_PRODUCTION, serial_number='SN-7')
        TestDataFactory.attach_docs(order, *PRE_SHIPPING_DOCS)
        result = services.request_transition(order.pk, OrderStatus.PRE_SHIPPING)
        self.assertEqual(result.order.status, OrderStatus.PRE_SHIPPING)

    def test_completed_needs_serial_number(self):
        order = TestDataFactory.create_order(status=OrderStatus.PRE_SHIPPING)
        with self.assertRaises(TransitionBlocked) as ctx:
            services.request_transition(order.pk, OrderStatus.COMPLETED)
        self.assertEqual(ctx.exception.report.missing_fields, ('serial_number',))

    def test_terminal_orders_cannot_move(self):
        completed = TestDataFactory.create_order(status=OrderStatus.COMPLETED)
        canceled = TestDataFactory.create_order(status=OrderStatus.CANCELED)
        with self.assertRaises(ValidationFailed):
            services.request_transition(completed.pk, OrderStatus.CANCELED)
        with self.assertRaises(ValidationFailed):
            services.request_transition(canceled.pk, OrderStatus.PENDING_PAYMENT_APPROVAL)
        with self.assertRaises(ValidationFailed):
            services.request_transition(completed.pk, OrderStatus.COMPLETED)

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValidationFailed):
            services.request_transition(self.order.pk, 'SHIPPED')
        self.assertEqual(OrderHistory.objects.filter(order=self.order).count(), 1)

    def test_unknown_order(self):
        with self.assertRaises(NotFound):
            services.request_transition(999999, OrderStatus.CANCELED)

    def test_one_history_row_per_change_in_time_order(self):
        order = TestDataFactory.create_order(status=OrderStatus.PRE_SHIPPING)
        services.request_transition(order.pk, OrderStatus.IN_PRODUCTION)
        services.request_transition(order.pk, OrderStatus.PENDING_PAYMENT_APPROVAL)
        services.request_transition(order.pk, OrderStatus.CANCELED)
        rows = list(OrderHistory.objects.filter(order=order))
        self.assertEqual(len(rows), 4)
        self.assertEqual([r.status for r in rows[1:]], ['IN_PRODUCTION', 'PENDING_PAYMENT_APPROVAL', 'CANCELED'])
        for earlier, later in zip(rows, rows[1:]):
            self.assertLessEqual(earlier.created_at, later.created_at)

    def test_add_comment_keeps_status(self):
        result = services.add_comment(self.order.pk, 'Called dealer about deposit', actor=self.admin)
        self.assertEqual(result.history.status, OrderStatus.PENDING_PAYMENT_APPROVAL)
        self.assertEqual(result.history.comment, 'Called dealer about deposit')
        with self.assertRaises(ValidationFailed):
            services.add_comment(self.order.pk, '  ')


class OrderModelGuardTests(TestCase):
    """Status only changes through request_transition; history is immutable"""

    def test_direct_status_edit_refused(self):
        order = TestDataFactory.create_order()
        order.status = OrderStatus.COMPLETED
        with self.assertRaises(ValueError):
            order.save()

    def test_order_created_in_initial_status_only(self):
        order = Order(
            dealer=TestDataFactory.create_dealer(),
            product_model=TestDataFactory.create_product_model(),
            delivery_address='2 Test Lane',
            status=OrderStatus.IN_PRODUCTION,
        )
        with self.assertRaises(ValueError):
            order.save()

    def test_other_fields_still_editable(self):
        order = TestDataFactory.create_order()
        order.serial_number = 'SN-55'
        order.save()
        self.assertEqual(Order.objects.get(pk=order.pk).serial_number, 'SN-55')

    def test_refreshed_order_saves_after_transition(self):
        order = TestDataFactory.create_order()
        services.request_transition(order.pk, OrderStatus.CANCELED)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.CANCELED)
        order.notes = 'Dealer withdrew by phone'
        order.save()
        self.assertEqual(Order.objects.get(pk=order.pk).notes, 'Dealer withdrew by phone')

    def test_refresh_of_other_fields_keeps_status_guard(self):
        order = TestDataFactory.create_order()
        order.status = OrderStatus.COMPLETED
        order.refresh_from_db(fields=['notes'])
        with self.assertRaises(ValueError):
            order.save()

    def test_admin_media_inline_is_read_only(self):
        inline = OrderMediaInline(Order, admin.site)
        request = RequestFactory().get('/admin/')
        request.user = TestDataFactory.create_user(role='SUPERADMIN')
        self.assertFalse(inline.can_delete)
        self.assertFalse(inline.has_add_permission(request))
        self.assertIn('file_url', inline.readonly_fields)
        self.assertIn('doc_type', inline.readonly_fields)

    def test_history_rows_are_append_only(self):
        order = TestDataFactory.create_order()
        row = order.history.first()
        row.comment = 'rewritten'
        with self.assertRaises(ImmutableRecordError):
            row.save()
        with self.assertRaises(ImmutableRecordError):
            row.delete()

    def test_append_record_requires_transaction(self):
        order = TestDataFactory.create_order()
        connection = mock.Mock(in_atomic_block=False)
        with mock.patch('orderflow.core.audit.transaction.get_connection', return_value=connection):
            with self.assertRaises(RuntimeError):
                append_record(OrderHistory, order=order, status=order.status)


@override_settings(ORDER_NOTIFICATIONS_EMAIL=True)
class NotificationTests(TestCase):
    """Dealer notifications are dispatched after commit and never fail a transition"""

    def setUp(self):
        self.dealer = TestDataFactory.create_dealer(email='dealer@test.com')
        self.order = TestDataFactory.create_order(dealer=self.dealer)

    def test_notification_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            services.request_transition(self.order.pk, OrderStatus.CANCELED, comment='Dealer withdrew')
            self.assertEqual(Notification.objects.count(), 0)
        self.assertEqual(len(callbacks), 1)
        notification = Notification.objects.get(order=self.order)
        self.assertEqual(notification.dealer, self.dealer)
        self.assertIn('Canceled', notification.message)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('Dealer withdrew', mail.outbox[0].body)
        self.assertTrue(AuditLog.objects.filter(action='order_status_change', object_id=str(self.order.pk)).exists())

    def test_blocked_transition_sends_nothing(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(TransitionBlocked):
                services.request_transition(self.order.pk, OrderStatus.IN_PRODUCTION)
        self.assertEqual(len(callbacks), 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_mail_failure_does_not_undo_transition(self):
        with mock.patch('orderflow.orders.notifications.send_mail', side_effect=ConnectionError('smtp down')):
            with self.captureOnCommitCallbacks(execute=True):
                services.request_transition(self.order.pk, OrderStatus.CANCELED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELED)
        self.assertEqual(Notification.objects.filter(order=self.order).count(), 1)


class OrderServiceTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.dealer = TestDataFactory.create_dealer()
        self.product_model = TestDataFactory.create_product_model()

    def test_create_order_writes_first_history_row(self):
        order = services.create_order(
            actor=self.admin,
            dealer=self.dealer,
            product_model=self.product_model,
            delivery_address='9 Pool Rd',
            status=OrderStatus.COMPLETED,
        )
        self.assertEqual(order.status, OrderStatus.PENDING_PAYMENT_APPROVAL)
        history = list(order.history.all())
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].comment, 'Order submitted')
        self.assertTrue(AuditLog.objects.filter(action='order_create', object_id=str(order.pk)).exists())

    def test_attach_media_validates_doc_type(self):
        order = TestDataFactory.create_order(dealer=self.dealer)
        with self.assertRaises(ValidationFailed):
            services.attach_media(order.pk, 'https://files.test/x.pdf', doc_type='PASSPORT')
        with self.assertRaises(ValidationFailed):
            services.attach_media(order.pk, '  ', doc_type=DocType.QUOTE)
        with self.assertRaises(NotFound):
            services.attach_media(999999, 'https://files.test/x.pdf')
        media = services.attach_media(order.pk, 'https://files.test/q.pdf', doc_type=DocType.QUOTE)
        self.assertEqual(media.doc_type, DocType.QUOTE)

    def test_clamp_priority(self):
        self.assertEqual(services.clamp_priority(0), 1)
        self.assertEqual(services.clamp_priority(20000), 9999)
        self.assertEqual(services.clamp_priority('42'), 42)
        self.assertIsNone(services.clamp_priority(None))
        with self.assertRaises(ValidationFailed):
            services.clamp_priority('soon')

    def test_update_order_fields_refuses_status(self):
        order = TestDataFactory.create_order(dealer=self.dealer)
        with self.assertRaises(ValidationFailed):
            services.update_order_fields(order.pk, {'status': OrderStatus.COMPLETED})
        order = services.update_order_fields(order.pk, {'serial_number': 'SN-9'}, actor=self.admin)
        self.assertEqual(order.serial_number, 'SN-9')
        log = AuditLog.objects.get(action='order_update', object_id=str(order.pk))
        self.assertEqual(log.changes['serial_number']['new'], 'SN-9')


class OrderAPITests(TestCase):
    """Orders API"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.dealer, self.dealer_user = TestDataFactory.create_dealer(with_user=True)
        self.other_dealer = TestDataFactory.create_dealer()
        self.product_model = TestDataFactory.create_product_model()
        self.order = TestDataFactory.create_order(dealer=self.dealer, product_model=self.product_model)
        self.admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)
        self.dealer_client = AuthenticatedAPIClient().authenticate_user(self.dealer_user)

    def test_requires_authentication(self):
        response = AuthenticatedAPIClient().get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_dealer_submits_order(self):
        data = {
            'product_model': self.product_model.id,
            'delivery_address': '12 Lakeview Dr',
            'hardware_skimmer': True,
        }
        response = self.dealer_client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PENDING_PAYMENT_APPROVAL')
        self.assertEqual(response.data['dealer'], self.dealer.id)
        order = Order.objects.get(pk=response.data['id'])
        self.assertEqual(order.history.count(), 1)

    def test_submit_requires_delivery_address(self):
        data = {'product_model': self.product_model.id, 'delivery_address': '  '}
        response = self.dealer_client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_dealer_sees_only_own_orders(self):
        other = TestDataFactory.create_order(dealer=self.other_dealer)
        response = self.dealer_client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o['id'] for o in response.data], [self.order.id])
        response = self.dealer_client.get(f'/api/v1/orders/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_filters_by_status(self):
        TestDataFactory.create_order(dealer=self.other_dealer, status=OrderStatus.IN_PRODUCTION)
        response = self.admin_client.get('/api/v1/orders/', {'status': 'IN_PRODUCTION'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'IN_PRODUCTION')

    def test_blocked_transition_returns_422_with_gaps(self):
        response = self.admin_client.patch(
            f'/api/v1/orders/{self.order.id}/status/', {'status': 'IN_PRODUCTION'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data['code'], 'missing_requirements')
        self.assertEqual(response.data['missing_docs'], [str(d) for d in IN_PRODUCTION_DOCS])
        self.assertEqual(response.data['missing_fields'], ['serial_number'])

    def test_transition_returns_order_and_history(self):
        response = self.admin_client.patch(
            f'/api/v1/orders/{self.order.id}/status/', {'status': 'CANCELED', 'comment': 'Duplicate'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['previous_status'], 'PENDING_PAYMENT_APPROVAL')
        self.assertEqual(response.data['order']['status'], 'CANCELED')
        self.assertEqual(response.data['history']['comment'], 'Duplicate')

    def test_terminal_transition_returns_400(self):
        order = TestDataFactory.create_order(dealer=self.dealer, status=OrderStatus.COMPLETED)
        response = self.admin_client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'CANCELED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_dealer_cannot_change_status(self):
        response = self.dealer_client.patch(
            f'/api/v1/orders/{self.order.id}/status/', {'status': 'CANCELED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_patch_refuses_status(self):
        response = self.admin_client.patch(
            f'/api/v1/orders/{self.order.id}/', {'status': 'COMPLETED', 'serial_number': 'SN-1'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.serial_number, '')

    def test_detail_patch_updates_fields(self):
        response = self.admin_client.patch(
            f'/api/v1/orders/{self.order.id}/', {'serial_number': 'SN-77'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['serial_number'], 'SN-77')

    def test_requirements_preview(self):
        response = self.dealer_client.get(f'/api/v1/orders/{self.order.id}/requirements/', {'target': 'in_production'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_satisfied'])
        self.assertIn('QUOTE', response.data['missing_docs'])
        response = self.dealer_client.get(f'/api/v1/orders/{self.order.id}/requirements/', {'target': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_history_newest_first_and_comment(self):
        response = self.admin_client.post(
            f'/api/v1/orders/{self.order.id}/history/comment/', {'comment': 'Deposit pending'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PENDING_PAYMENT_APPROVAL')
        response = self.dealer_client.get(f'/api/v1/orders/{self.order.id}/history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['comment'], 'Deposit pending')
        self.assertEqual(response.data[-1]['comment'], 'Order submitted')

    def test_dealer_media_is_always_visible(self):
        response = self.dealer_client.post(
            f'/api/v1/orders/{self.order.id}/media/',
            {'file_url': 'https://files.test/proof.pdf', 'doc_type': 'PROOF_OF_PAYMENT', 'visible_to_dealer': False},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['visible_to_dealer'])
        self.assertEqual(response.data['doc_type_label'], 'Proof of Payment')

    def test_dealer_does_not_see_internal_media(self):
        TestDataFactory.attach_docs(self.order, DocType.BUILD_SHEET, visible_to_dealer=False)
        TestDataFactory.attach_docs(self.order, DocType.QUOTE)
        response = self.dealer_client.get(f'/api/v1/orders/{self.order.id}/media/')
        self.assertEqual([m['doc_type'] for m in response.data], ['QUOTE'])
        response = self.admin_client.get(f'/api/v1/orders/{self.order.id}/media/')
        self.assertEqual(len(response.data), 2)

    def test_schedule_clamps_priority(self):
        response = self.admin_client.patch(
            f'/api/v1/orders/{self.order.id}/schedule/',
            {'production_priority': 0, 'requested_ship_date': '2026-11-02'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['production_priority'], 1)
        self.assertEqual(response.data['requested_ship_date'], '2026-11-02')

    def test_assign_factory(self):
        factory = TestDataFactory.create_factory()
        response = self.admin_client.patch(
            f'/api/v1/orders/{self.order.id}/factory/',
            {'factory': factory.id, 'shipping_method': ' Flatbed '},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['factory'], factory.id)
        self.assertEqual(response.data['shipping_method'], 'Flatbed')

    def test_dealer_notifications(self):
        Notification.objects.create(dealer=self.dealer, order=self.order, title='t', message='m')
        Notification.objects.create(dealer=self.other_dealer, title='t', message='m')
        response = self.dealer_client.get('/api/v1/notifications/')
        self.assertEqual(len(response.data), 1)
        response = self.dealer_client.post(f"/api/v1/notifications/{response.data[0]['id']}/read/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['read_at'])
        response = self.dealer_client.get('/api/v1/notifications/', {'unread': 'true'})
        self.assertEqual(len(response.data), 0)
