from django.urls import path
from .views import item_list_create, stock_list, txn_list_create, count_adjust

urlpatterns = [
    path('inventory/items/', item_list_create, name='inventory-item-list-create'),
    path('inventory/stocks/', stock_list, name='inventory-stock-list'),
    path('inventory/txns/', txn_list_create, name='inventory-txn-list-create'),
    path('inventory/adjust/', count_adjust, name='inventory-count-adjust'),
]
