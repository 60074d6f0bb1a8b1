"""
Stock ledger engine, shared by the finished-goods and raw-material ledgers.

Every movement is one atomic unit of work:

1. get-or-create the row for the ledger key (race-safe against the unique
   key: a losing concurrent creator re-reads the winner's row),
2. one conditional UPDATE ``quantity = quantity + delta`` which, for a debit,
   only matches while ``quantity >= -delta``,
3. zero rows matched means insufficient stock and the whole unit rolls back,
   including a row created in step 1,
4. otherwise exactly one transaction row is appended.

No read-then-write window exists for the quantity itself.
"""
import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.db.models import F, Sum
from django.utils import timezone

from orderflow.core.audit import append_record
from orderflow.core.exceptions import Conflict, InsufficientStock, NotFound, ValidationFailed
from .models import CREDIT_KINDS, DEBIT_KINDS, TxnKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Movement:
    row: object
    txn: object


def signed_delta(kind, quantity):
    """Signed effect of a movement, validating kind and amount"""
    try:
        kind = TxnKind(kind)
    except ValueError:
        raise ValidationFailed(f"Invalid type: {kind}", field='kind')
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationFailed('quantity must be an integer', field='quantity')

    if kind == TxnKind.ADJUST:
        if quantity == 0:
            raise ValidationFailed('quantity cannot be 0 for ADJUST', field='quantity')
        return quantity
    if quantity <= 0:
        raise ValidationFailed(f"quantity must be > 0 for {kind}", field='quantity')
    if kind in DEBIT_KINDS:
        return -quantity
    if kind in CREDIT_KINDS:
        return quantity
    raise ValidationFailed(f"Invalid type: {kind}", field='kind')


class StockLedger:
    """One ledger instantiation: a row model keyed by `key_fields` and its txn model.

    The txn model must have a foreign key named `stock` to the row model.
    """

    def __init__(self, name, row_model, txn_model, key_fields, kinds):
        self.name = name
        self.row_model = row_model
        self.txn_model = txn_model
        self.key_fields = tuple(key_fields)
        self.kinds = frozenset(TxnKind(k) for k in kinds)

    def __repr__(self):
        return f"<StockLedger {self.name}>"

    def _key(self, key):
        missing = [f for f in self.key_fields if f not in key]
        extra = [f for f in key if f not in self.key_fields]
        if missing or extra:
            raise ValidationFailed(f"{self.name} key needs exactly {list(self.key_fields)}")
        return {f: key[f] for f in self.key_fields}

    def validate(self, kind, quantity):
        delta = signed_delta(kind, quantity)
        if TxnKind(kind) not in self.kinds:
            raise ValidationFailed(
                f"{kind} is not a {self.name} movement; allowed: {sorted(str(k) for k in self.kinds)}",
                field='kind',
            )
        return delta

    def get_or_create_row(self, key, defaults=None):
        """Idempotent upsert-by-key; concurrent first writers converge on one row"""
        key = self._key(key)
        for attempt in range(2):
            try:
                row, created = self.row_model.objects.get_or_create(defaults=defaults or {}, **key)
                if created:
                    logger.info(f"{self.name}: created stock row {row.pk} for {key}")
                return row, created
            except IntegrityError as e:
                # the winner's row is not visible yet; one immediate retry
                logger.warning(f"{self.name}: creation race on {key} (attempt {attempt + 1}): {str(e)}")
        raise Conflict(f"{self.name} row for {key} is being created concurrently, retry", key={k: str(v) for k, v in key.items()})

    def get_row(self, row_id):
        try:
            return self.row_model.objects.get(pk=row_id)
        except (self.row_model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"{self.name} row {row_id} not found")

    def apply(self, kind, quantity, key=None, row=None, order=None, notes='', actor=None):
        """Apply one movement to the row for `key` (created on demand) or to an existing `row`."""
        if (key is None) == (row is None):
            raise ValueError('pass exactly one of key or row')
        delta = self.validate(kind, quantity)
        kind = TxnKind(kind)

        with transaction.atomic():
            if row is None:
                row, _ = self.get_or_create_row(key)
            elif not self.row_model.objects.filter(pk=row.pk).exists():
                raise NotFound(f"{self.name} row {row.pk} not found")

            matched = self.row_model.objects.filter(pk=row.pk)
            if delta < 0:
                matched = matched.filter(quantity__gte=-delta)
            updated = matched.update(quantity=F('quantity') + delta, updated_at=timezone.now())

            if updated != 1:
                current = self.row_model.objects.filter(pk=row.pk).values_list('quantity', flat=True).first()
                logger.warning(f"{self.name}: insufficient stock on row {row.pk}: on hand {current}, delta {delta}")
                raise InsufficientStock(current_quantity=current, delta=delta)

            txn = append_record(
                self.txn_model,
                stock=row,
                kind=kind,
                quantity=abs(quantity),
                delta=delta,
                order=order,
                notes=notes or '',
                actor=actor if actor is not None and getattr(actor, 'is_authenticated', False) else None,
            )
            row.refresh_from_db()

        logger.info(f"{self.name}: {kind} {quantity} on row {row.pk} -> {row.quantity}")
        return Movement(row=row, txn=txn)

    def set_quantity(self, key, new_quantity, notes='', actor=None, order=None):
        """Count adjustment: bring the row to an absolute quantity through one ADJUST txn.

        Returns a Movement whose txn is None when the count already matched.
        """
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity < 0:
            raise ValidationFailed('quantity must be an integer >= 0', field='quantity')
        if TxnKind.ADJUST not in self.kinds:
            raise ValidationFailed(f"{self.name} does not accept ADJUST", field='kind')

        with transaction.atomic():
            row, _ = self.get_or_create_row(key)
            current = self.row_model.objects.select_for_update().get(pk=row.pk).quantity
            if new_quantity == current:
                return Movement(row=row, txn=None)
            return self.apply(TxnKind.ADJUST, new_quantity - current, row=row, order=order, notes=notes, actor=actor)

    def recent_txns(self, row=None, kind=None, order=None, limit=50, related=(), **filters):
        """Newest-first txns, optionally narrowed to a row, kind, linked order or key fields"""
        queryset = self.txn_model.objects.select_related('stock', 'order', 'actor', *related)
        if row is not None:
            queryset = queryset.filter(stock=row)
        if kind:
            queryset = queryset.filter(kind=kind)
        if order is not None:
            queryset = queryset.filter(order=order)
        for name, value in filters.items():
            if name not in self.key_fields:
                raise ValidationFailed(f"Unknown {self.name} filter: {name}")
            if value is not None:
                queryset = queryset.filter(**{f"stock__{name}": value})
        return queryset.order_by('-created_at', '-id')[:limit]

    def txn_balance(self, row):
        return self.txn_model.objects.filter(stock=row).aggregate(total=Sum('delta'))['total'] or 0

    def discrepancies(self):
        """Rows whose quantity differs from the signed sum of their txns"""
        totals = dict(
            self.txn_model.objects.order_by().values('stock_id').annotate(total=Sum('delta')).values_list('stock_id', 'total')
        )
        result = []
        for row in self.row_model.objects.all().order_by('pk'):
            balance = totals.get(row.pk, 0) or 0
            if balance != row.quantity:
                result.append((row, balance))
        return result
