"""
Abstract stock ledger: a quantity row per ledger key plus an append-only
transaction log. Concrete ledgers subclass both and add their key columns.
"""
from django.conf import settings
from django.db import models
from orderflow.core.audit import AppendOnlyRecord


class TxnKind(models.TextChoices):
    ADD = 'ADD', 'Add'
    IN = 'IN', 'Stock In'
    RESERVE = 'RESERVE', 'Reserve'
    OUT = 'OUT', 'Stock Out'
    SHIP = 'SHIP', 'Ship'
    RELEASE = 'RELEASE', 'Release'
    ADJUST = 'ADJUST', 'Adjust'


CREDIT_KINDS = frozenset({TxnKind.ADD, TxnKind.IN, TxnKind.RELEASE})
DEBIT_KINDS = frozenset({TxnKind.RESERVE, TxnKind.OUT, TxnKind.SHIP})


class StockRow(models.Model):
    # PositiveIntegerField carries a DB check constraint, quantity >= 0
    quantity = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StockTxn(AppendOnlyRecord):
    """One quantity-affecting event. `quantity` is the magnitude, `delta` the signed effect."""
    kind = models.CharField(max_length=10, choices=TxnKind.choices)
    quantity = models.PositiveIntegerField()
    delta = models.IntegerField()
    order = models.ForeignKey('orders.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='%(app_label)s_txns')
    notes = models.TextField(blank=True)
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='%(app_label)s_txns')

    class Meta:
        abstract = True
        ordering = ['-created_at', '-id']
