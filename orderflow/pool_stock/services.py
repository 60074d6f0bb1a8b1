"""
Finished-goods ledger: pools per (factory, model, color, condition).

A NULL color is a valid key value; `PoolStock.color_key` folds it to 'NONE'
so the unique constraint still holds for colorless rows.
"""
import logging

from django.db import transaction
from django.db.models import Sum

from orderflow.catalog.models import ProductModel, Color
from orderflow.core.exceptions import NotFound, ValidationFailed
from orderflow.core.utils import clean_text, create_audit_log
from orderflow.ledger.models import TxnKind
from orderflow.ledger.services import Movement, StockLedger
from orderflow.locations.models import Factory
from orderflow.orders.models import Order
from .models import PoolStock, PoolStockTxn

logger = logging.getLogger(__name__)

pool_stock_ledger = StockLedger(
    name='pool stock',
    row_model=PoolStock,
    txn_model=PoolStockTxn,
    key_fields=('factory', 'product_model', 'color', 'condition'),
    kinds=(TxnKind.ADD, TxnKind.RESERVE, TxnKind.RELEASE, TxnKind.SHIP, TxnKind.ADJUST),
)


def _get(model, pk, field):
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{model.__name__} {pk} not found", field=field)


def _condition(value):
    condition = (value or PoolStock.CONDITION_READY).strip().upper()
    if condition not in dict(PoolStock.CONDITION_CHOICES):
        raise ValidationFailed(f"Invalid condition: {value}", field='condition')
    return condition


def _audit(request, actor, movement, changes):
    create_audit_log(
        request=request,
        user=actor,
        action='stock_move',
        model_name='PoolStock',
        object_id=movement.row.pk,
        object_reference=str(movement.row),
        changes=changes,
    )


def receive_stock(factory_id, product_model_id, color_id=None, condition=None, quantity=0,
                  eta=None, notes=None, actor=None, request=None):
    """Upsert the row for the key; a positive quantity is booked as one ADD txn.

    ETA and notes are updated when given, so a zero-quantity call just
    registers or annotates the row.
    """
    factory = _get(Factory, factory_id, 'factory')
    product_model = _get(ProductModel, product_model_id, 'product_model')
    color = _get(Color, color_id, 'color') if color_id not in (None, '') else None
    condition = _condition(condition)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationFailed('quantity must be an integer >= 0', field='quantity')
    notes = clean_text(notes)

    key = {'factory': factory, 'product_model': product_model, 'color': color, 'condition': condition}
    with transaction.atomic():
        row, created = pool_stock_ledger.get_or_create_row(key)
        touched = []
        if eta is not None and row.eta != eta:
            row.eta = eta
            touched.append('eta')
        if notes is not None and row.notes != notes:
            row.notes = notes
            touched.append('notes')
        if touched:
            row.save(update_fields=touched + ['updated_at'])

        if quantity > 0:
            movement = pool_stock_ledger.apply(TxnKind.ADD, quantity, row=row, notes=notes or '', actor=actor)
        else:
            movement = Movement(row=row, txn=None)

    if movement.txn is not None:
        _audit(request, actor, movement, {'kind': TxnKind.ADD.value, 'delta': quantity, 'quantity': movement.row.quantity})
    elif created:
        logger.info(f"pool stock: registered empty row {row.pk}")
    return movement, created


def move_pool_stock(stock_id, kind, quantity, order_id=None, notes='', actor=None, request=None):
    """Apply a movement to an existing row; debits never go below zero"""
    row = pool_stock_ledger.get_row(stock_id)
    order = _get(Order, order_id, 'order') if order_id not in (None, '') else None
    movement = pool_stock_ledger.apply(kind, quantity, row=row, order=order, notes=notes, actor=actor)
    _audit(request, actor, movement, {
        'kind': str(movement.txn.kind),
        'delta': movement.txn.delta,
        'quantity': movement.row.quantity,
        'order_id': order.pk if order else None,
    })
    return movement


def summary():
    """Totals per factory per condition, every condition present"""
    conditions = [c for c, _ in PoolStock.CONDITION_CHOICES]
    result = {}
    for factory in Factory.objects.filter(is_active=True).order_by('name'):
        result[factory.pk] = {
            'factory': factory.pk,
            'factory_name': factory.name,
            'totals': {c: 0 for c in conditions},
            'total': 0,
        }
    rows = (
        PoolStock.objects.order_by()
        .values('factory_id', 'factory__name', 'condition')
        .annotate(total=Sum('quantity'))
    )
    for row in rows:
        entry = result.setdefault(row['factory_id'], {
            'factory': row['factory_id'],
            'factory_name': row['factory__name'],
            'totals': {c: 0 for c in conditions},
            'total': 0,
        })
        entry['totals'][row['condition']] = row['total'] or 0
        entry['total'] += row['total'] or 0
    return list(result.values())
