"""
Order lifecycle operations.

`request_transition` is the only way an order's status changes. A forward
move is gated on the requirement tables; the gate is evaluated against the
row-locked order inside the same transaction that writes the new status and
its history row, so a concurrent edit cannot slip between check and write.
"""
import logging
from dataclasses import dataclass
from functools import partial

from django.db import transaction

from orderflow.core.audit import append_record
from orderflow.core.exceptions import NotFound, TransitionBlocked, ValidationFailed
from orderflow.core.utils import clean_text, create_audit_log
from .checker import check_order_for_status
from .flow import INITIAL_STATUS, is_forward, is_terminal, parse_status, status_label
from .models import Order, OrderHistory, OrderMedia
from .notifications import notify_status_change
from .requirements import DocType

logger = logging.getLogger(__name__)

PRIORITY_MIN = 1
PRIORITY_MAX = 9999


@dataclass(frozen=True)
class TransitionResult:
    order: Order
    history: OrderHistory
    previous_status: str

    @property
    def changed(self):
        return self.previous_status != self.order.status


def _actor(user):
    if user is not None and getattr(user, 'is_authenticated', False):
        return user
    return None


def _locked_order(order_id):
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Order {order_id} not found")


def _after_transition(order_id, previous, target, comment, actor, request):
    notify_status_change(order_id, target, comment)
    create_audit_log(
        request=request,
        user=actor,
        action='order_status_change',
        model_name='Order',
        object_id=order_id,
        object_reference=f"Order #{order_id}",
        changes={'prev': previous, 'next': str(target), 'comment': comment},
    )


def request_transition(order_id, target_status, comment='', actor=None, request=None):
    """Move an order to `target_status`.

    Raises ValidationFailed for an unknown target or a terminal order,
    NotFound for an unknown order and TransitionBlocked when a forward move
    is missing documents or fields. Nothing is written unless the whole
    transition is accepted.
    """
    target = parse_status(target_status)
    if target is None:
        raise ValidationFailed(f"Invalid status: {target_status}", field='status')
    actor = _actor(actor)

    with transaction.atomic():
        order = _locked_order(order_id)
        previous = order.status

        if is_terminal(previous):
            raise ValidationFailed(
                f"Order {order.pk} is {status_label(previous)} and can no longer change status",
                current_status=previous,
            )

        if is_forward(previous, target):
            report = check_order_for_status(order, target)
            if not report.is_satisfied:
                logger.warning(
                    f"Order {order.pk} blocked {previous} -> {target}: "
                    f"docs={[str(d) for d in report.missing_docs]} fields={list(report.missing_fields)}"
                )
                raise TransitionBlocked(report)

        order._apply_status(target)
        note = clean_text(comment) or f"Status changed to {target.label}"
        history = append_record(OrderHistory, order=order, status=target, comment=note, actor=actor)

        transaction.on_commit(
            partial(_after_transition, order.pk, previous, target, note, actor, request),
            robust=True,
        )

    logger.info(f"Order {order.pk} moved {previous} -> {target} by {actor.username if actor else 'system'}")
    return TransitionResult(order=order, history=history, previous_status=previous)


def add_comment(order_id, comment, actor=None, request=None):
    """Record a comment as a sideways move that keeps the current status"""
    note = clean_text(comment)
    if not note:
        raise ValidationFailed('comment is required', field='comment')
    try:
        current = Order.objects.only('status').get(pk=order_id).status
    except (Order.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Order {order_id} not found")
    return request_transition(order_id, current, note, actor=actor, request=request)


def create_order(actor=None, request=None, **fields):
    """Intake: a new order in the initial status with its first history row"""
    actor = _actor(actor)
    fields.pop('status', None)
    with transaction.atomic():
        order = Order.objects.create(status=INITIAL_STATUS, **fields)
        append_record(OrderHistory, order=order, status=INITIAL_STATUS, comment='Order submitted', actor=actor)

    create_audit_log(
        request=request,
        user=actor,
        action='order_create',
        model_name='Order',
        object_id=order.pk,
        object_reference=f"Order #{order.pk}",
        changes={'dealer_id': order.dealer_id, 'product_model_id': order.product_model_id},
    )
    logger.info(f"Order {order.pk} submitted for dealer {order.dealer_id}")
    return order


def attach_media(order_id, file_url, doc_type=None, media_type='update', visible_to_dealer=True,
                 actor=None, request=None):
    """Register an attachment whose file was already stored externally"""
    file_url = clean_text(file_url)
    if not file_url:
        raise ValidationFailed('file_url is required', field='file_url')
    doc_type = clean_text(doc_type)
    if doc_type is not None and doc_type not in DocType.values:
        raise ValidationFailed(f"Invalid doc_type: {doc_type}", field='doc_type')
    if media_type not in dict(OrderMedia.TYPE_CHOICES):
        raise ValidationFailed(f"Invalid media_type: {media_type}", field='media_type')
    if not Order.objects.filter(pk=order_id).exists():
        raise NotFound(f"Order {order_id} not found")

    media = OrderMedia.objects.create(
        order_id=order_id,
        file_url=file_url,
        doc_type=doc_type,
        media_type=media_type,
        visible_to_dealer=visible_to_dealer,
        uploaded_by=_actor(actor),
    )
    create_audit_log(
        request=request,
        user=_actor(actor),
        action='media_add',
        model_name='OrderMedia',
        object_id=media.pk,
        object_reference=f"Order #{order_id}",
        changes={'doc_type': doc_type, 'media_type': media_type, 'visible_to_dealer': visible_to_dealer},
    )
    return media


def clamp_priority(value):
    if value is None or value == '':
        return None
    try:
        priority = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed('production_priority must be a number', field='production_priority')
    return max(PRIORITY_MIN, min(PRIORITY_MAX, priority))


def update_order_fields(order_id, fields, actor=None, request=None, action='order_update'):
    """Update scalar order attributes; status is never one of them"""
    if 'status' in fields:
        raise ValidationFailed('status changes go through the status endpoint', field='status')
    with transaction.atomic():
        order = _locked_order(order_id)
        changes = {}
        for name, value in fields.items():
            old = getattr(order, name)
            if old != value:
                changes[name] = {'old': str(old) if old is not None else None,
                                 'new': str(value) if value is not None else None}
                setattr(order, name, value)
        if changes:
            order.save()

    if changes:
        create_audit_log(
            request=request,
            user=_actor(actor),
            action=action,
            model_name='Order',
            object_id=order.pk,
            object_reference=f"Order #{order.pk}",
            changes=changes,
        )
    return order
