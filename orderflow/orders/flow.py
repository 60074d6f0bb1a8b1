"""
Order lifecycle states.

The canonical forward sequence is kept apart from the status type itself:
CANCELED is a valid status with no position, so it is never "forward".
"""
from django.db import models


class OrderStatus(models.TextChoices):
    PENDING_PAYMENT_APPROVAL = 'PENDING_PAYMENT_APPROVAL', 'Pending Payment Approval'
    IN_PRODUCTION = 'IN_PRODUCTION', 'In Production'
    PRE_SHIPPING = 'PRE_SHIPPING', 'Pre-Shipping'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELED = 'CANCELED', 'Canceled'


FLOW_ORDER = (
    OrderStatus.PENDING_PAYMENT_APPROVAL,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.PRE_SHIPPING,
    OrderStatus.COMPLETED,
)

INITIAL_STATUS = OrderStatus.PENDING_PAYMENT_APPROVAL

# No outgoing transitions at all, CANCELED included
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELED})


def parse_status(value):
    """Return the OrderStatus for `value`, or None when it is not a declared variant"""
    if isinstance(value, OrderStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return OrderStatus(value.strip().upper())
    except ValueError:
        return None


def flow_position(status):
    try:
        return FLOW_ORDER.index(status)
    except ValueError:
        return None


def is_forward(current, target):
    current_pos = flow_position(current)
    target_pos = flow_position(target)
    if current_pos is None or target_pos is None:
        return False
    return target_pos > current_pos


def is_terminal(status):
    return status in TERMINAL_STATUSES


def status_label(status):
    parsed = parse_status(status)
    return parsed.label if parsed else str(status).replace('_', ' ')
