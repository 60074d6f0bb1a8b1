"""
Raw-material ledger: stock per (item, location), moved by IN / OUT / ADJUST.
"""
import logging

from django.db.models import F

from orderflow.core.exceptions import NotFound, ValidationFailed
from orderflow.core.utils import create_audit_log
from orderflow.ledger.models import TxnKind
from orderflow.ledger.services import StockLedger
from orderflow.locations.models import InventoryLocation
from orderflow.orders.models import Order
from .models import InventoryItem, InventoryStock, InventoryTxn

logger = logging.getLogger(__name__)

inventory_ledger = StockLedger(
    name='inventory',
    row_model=InventoryStock,
    txn_model=InventoryTxn,
    key_fields=('item', 'location'),
    kinds=(TxnKind.IN, TxnKind.OUT, TxnKind.ADJUST),
)


def _active_item(item_id):
    try:
        item = InventoryItem.objects.get(pk=item_id)
    except (InventoryItem.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Item {item_id} not found", field='item')
    if not item.is_active:
        raise ValidationFailed(f"Item {item.sku} is inactive", field='item')
    return item


def _active_location(location_id):
    try:
        location = InventoryLocation.objects.get(pk=location_id)
    except (InventoryLocation.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Location {location_id} not found", field='location')
    if not location.is_active:
        raise ValidationFailed(f"Location {location.name} is inactive", field='location')
    return location


def _linked_order(order_id):
    if order_id in (None, ''):
        return None
    try:
        return Order.objects.get(pk=order_id)
    except (Order.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Order {order_id} not found", field='order')


def _audit(request, actor, action, movement, changes):
    create_audit_log(
        request=request,
        user=actor,
        action=action,
        model_name='InventoryStock',
        object_id=movement.row.pk,
        object_reference=f"{movement.row.item.sku} @ {movement.row.location.name}",
        changes=changes,
    )


def move_inventory(item_id, location_id, kind, quantity, order_id=None, notes='', actor=None, request=None):
    """Record one raw-material movement; OUT never takes a row below zero"""
    item = _active_item(item_id)
    location = _active_location(location_id)
    order = _linked_order(order_id)

    movement = inventory_ledger.apply(
        kind, quantity,
        key={'item': item, 'location': location},
        order=order, notes=notes, actor=actor,
    )
    _audit(request, actor, 'stock_move', movement, {
        'kind': str(movement.txn.kind),
        'delta': movement.txn.delta,
        'quantity': movement.row.quantity,
        'order_id': order.pk if order else None,
    })
    return movement


def count_adjust(item_id, location_id, counted, notes='', actor=None, request=None):
    """Daily count: bring on-hand to `counted` through one ADJUST txn (none when unchanged)"""
    item = _active_item(item_id)
    location = _active_location(location_id)

    movement = inventory_ledger.set_quantity(
        {'item': item, 'location': location}, counted,
        notes=notes or 'Daily count', actor=actor,
    )
    if movement.txn is not None:
        _audit(request, actor, 'stock_count', movement, {
            'delta': movement.txn.delta,
            'quantity': movement.row.quantity,
        })
    else:
        logger.info(f"inventory: count for {item.sku} @ {location.name} unchanged at {counted}")
    return movement


def low_stock():
    """Rows below their item's minimum"""
    return InventoryStock.objects.select_related('item', 'location').filter(quantity__lt=F('item__min_stock'))
