import django_filters
from django.db.models import Q
from .flow import OrderStatus
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Admin order board filters"""
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    dealer = django_filters.NumberFilter(field_name='dealer_id')
    factory = django_filters.NumberFilter(field_name='factory_id')
    product_model = django_filters.NumberFilter(field_name='product_model_id')
    search = django_filters.CharFilter(method='filter_search', label='Search')
    created_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    created_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = ['status', 'dealer', 'factory', 'product_model', 'search']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(serial_number__icontains=value) |
            Q(dealer__name__icontains=value) |
            Q(delivery_address__icontains=value)
        )
