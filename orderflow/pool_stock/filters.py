import django_filters
from .models import PoolStock


class PoolStockFilter(django_filters.FilterSet):
    factory = django_filters.NumberFilter(field_name='factory_id')
    product_model = django_filters.NumberFilter(field_name='product_model_id')
    color = django_filters.NumberFilter(field_name='color_id')
    condition = django_filters.ChoiceFilter(choices=PoolStock.CONDITION_CHOICES)

    class Meta:
        model = PoolStock
        fields = ['factory', 'product_model', 'color', 'condition']
