"""
Requirement tables: which document kinds and order fields must be present
before an order may move forward into a given status.

These are configuration, not runtime state; the tables are read-only
mappings and `requirements_for` is a pure lookup.
"""
from collections import namedtuple
from types import MappingProxyType

from django.db import models

from .flow import OrderStatus


class DocType(models.TextChoices):
    PROOF_OF_PAYMENT = 'PROOF_OF_PAYMENT', 'Proof of Payment'
    QUOTE = 'QUOTE', 'Quote'
    INVOICE = 'INVOICE', 'Invoice'
    BUILD_SHEET = 'BUILD_SHEET', 'Build Sheet'
    POST_PRODUCTION_MEDIA = 'POST_PRODUCTION_MEDIA', 'Post-production Photos/Video'
    SHIPPING_CHECKLIST = 'SHIPPING_CHECKLIST', 'Shipping Checklist'
    PRE_SHIPPING_MEDIA = 'PRE_SHIPPING_MEDIA', 'Pre-shipping Photos/Video'
    BILL_OF_LADING = 'BILL_OF_LADING', 'Bill of Lading'
    PROOF_OF_FINAL_PAYMENT = 'PROOF_OF_FINAL_PAYMENT', 'Proof of Final Payment'
    PAID_INVOICE = 'PAID_INVOICE', 'Paid Invoice'
    WARRANTY = 'WARRANTY', 'Warranty'
    MANUAL = 'MANUAL', 'Manual'
    OTHER = 'OTHER', 'Other'


Requirements = namedtuple('Requirements', ['docs', 'fields'])

NO_REQUIREMENTS = Requirements(docs=(), fields=())

REQUIRED_DOCS = MappingProxyType({
    OrderStatus.IN_PRODUCTION: (
        DocType.PROOF_OF_PAYMENT,
        DocType.QUOTE,
        DocType.INVOICE,
        DocType.BUILD_SHEET,
        DocType.POST_PRODUCTION_MEDIA,
    ),
    OrderStatus.PRE_SHIPPING: (
        DocType.SHIPPING_CHECKLIST,
        DocType.PRE_SHIPPING_MEDIA,
        DocType.BILL_OF_LADING,
        DocType.PROOF_OF_FINAL_PAYMENT,
        DocType.PAID_INVOICE,
    ),
})

# Names are Order attributes; any scalar attribute may be listed
REQUIRED_FIELDS = MappingProxyType({
    OrderStatus.IN_PRODUCTION: ('serial_number',),
    OrderStatus.PRE_SHIPPING: ('serial_number',),
    OrderStatus.COMPLETED: ('serial_number',),
})

FIELD_LABELS = MappingProxyType({
    'serial_number': 'Serial Number',
    'requested_ship_date': 'Requested Ship Date',
    'production_priority': 'Production Priority',
    'payment_proof_url': 'Payment Proof',
    'factory_id': 'Factory',
})

# Two legacy ways of recording the same fact: a document kind and an order field
EQUIVALENT_DOC_FIELDS = MappingProxyType({
    DocType.PROOF_OF_PAYMENT: 'payment_proof_url',
})


def requirements_for(status):
    return Requirements(
        docs=REQUIRED_DOCS.get(status, ()),
        fields=REQUIRED_FIELDS.get(status, ()),
    )


def label_doc_type(doc_type):
    if not doc_type:
        return None
    try:
        return DocType(doc_type).label
    except ValueError:
        return str(doc_type).replace('_', ' ')


def label_field(field_name):
    return FIELD_LABELS.get(field_name, field_name.replace('_', ' '))
