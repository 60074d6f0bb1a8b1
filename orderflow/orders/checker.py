"""
Presence checker: which required documents and fields an order is missing.

Query-only. The legacy payment-proof field and the PROOF_OF_PAYMENT document
kind record the same fact, so either one satisfies a requirement for the
other (see `EQUIVALENT_DOC_FIELDS`).
"""
from dataclasses import dataclass, field

from orderflow.core.exceptions import NotFound

from .models import Order, OrderMedia
from .requirements import EQUIVALENT_DOC_FIELDS, label_doc_type, label_field, requirements_for


@dataclass(frozen=True)
class RequirementReport:
    target_status: str
    missing_docs: tuple = field(default_factory=tuple)
    missing_fields: tuple = field(default_factory=tuple)
    satisfied_docs: tuple = field(default_factory=tuple)
    satisfied_fields: tuple = field(default_factory=tuple)

    @property
    def is_satisfied(self):
        return not self.missing_docs and not self.missing_fields

    def as_dict(self):
        return {
            'target_status': str(self.target_status),
            'missing_docs': [str(d) for d in self.missing_docs],
            'missing_fields': list(self.missing_fields),
            'satisfied_docs': [str(d) for d in self.satisfied_docs],
            'satisfied_fields': list(self.satisfied_fields),
            'missing_doc_labels': [label_doc_type(d) for d in self.missing_docs],
            'missing_field_labels': [label_field(f) for f in self.missing_fields],
        }


def has_value(value):
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def attached_doc_types(order_id):
    """Deduplicated document kinds attached to an order"""
    return set(
        OrderMedia.objects.filter(order_id=order_id, doc_type__isnull=False)
        .exclude(doc_type='')
        .values_list('doc_type', flat=True)
        .distinct()
    )


def check_requirements(order, requirements, target_status=None):
    """Compare an order against explicit requirement sets.

    `order` is an Order instance (already loaded, possibly row-locked by the
    caller) or an order id.
    """
    if not isinstance(order, Order):
        try:
            order = Order.objects.get(pk=order)
        except Order.DoesNotExist:
            raise NotFound(f"Order {order} not found")

    if not requirements.docs and not requirements.fields:
        return RequirementReport(target_status=target_status)

    present_fields = {name for name in requirements.fields if has_value(getattr(order, name, None))}
    needs_docs = bool(requirements.docs) or any(f in requirements.fields for f in EQUIVALENT_DOC_FIELDS.values())
    present_docs = attached_doc_types(order.pk) if needs_docs else set()

    # reconcile the two legacy records of the same fact
    for doc_type, field_name in EQUIVALENT_DOC_FIELDS.items():
        if has_value(getattr(order, field_name, None)):
            present_docs.add(doc_type)
        if doc_type in present_docs and field_name in requirements.fields:
            present_fields.add(field_name)

    missing_docs = tuple(d for d in requirements.docs if d not in present_docs)
    satisfied_docs = tuple(d for d in requirements.docs if d in present_docs)
    missing_fields = tuple(f for f in requirements.fields if f not in present_fields)
    satisfied_fields = tuple(f for f in requirements.fields if f in present_fields)

    return RequirementReport(
        target_status=target_status,
        missing_docs=missing_docs,
        missing_fields=missing_fields,
        satisfied_docs=satisfied_docs,
        satisfied_fields=satisfied_fields,
    )


def check_order_for_status(order, target_status):
    return check_requirements(order, requirements_for(target_status), target_status=target_status)
