import django_filters
from orderflow.ledger.models import TxnKind
from .models import InventoryStock, InventoryTxn


class InventoryStockFilter(django_filters.FilterSet):
    item = django_filters.NumberFilter(field_name='item_id')
    location = django_filters.NumberFilter(field_name='location_id')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = InventoryStock
        fields = ['item', 'location', 'search']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(item__sku__icontains=value) | queryset.filter(item__name__icontains=value)


class InventoryTxnFilter(django_filters.FilterSet):
    """Txn log filters: item, location, kind, linked order, factory of the location"""
    item = django_filters.NumberFilter(field_name='stock__item_id')
    location = django_filters.NumberFilter(field_name='stock__location_id')
    factory = django_filters.NumberFilter(field_name='stock__location__factory_id')
    kind = django_filters.ChoiceFilter(choices=[(k.value, k.label) for k in (TxnKind.IN, TxnKind.OUT, TxnKind.ADJUST)])
    order = django_filters.NumberFilter(field_name='order_id')

    class Meta:
        model = InventoryTxn
        fields = ['item', 'location', 'factory', 'kind', 'order']
