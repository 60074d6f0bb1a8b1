from django.urls import path
from .views import pool_stock_list_create, pool_stock_detail, pool_stock_txns, pool_stock_summary, pool_stock_in_stock

urlpatterns = [
    path('pool-stock/', pool_stock_list_create, name='pool-stock-list-create'),
    path('pool-stock/in-stock/', pool_stock_in_stock, name='pool-stock-in-stock'),
    path('pool-stock/summary/', pool_stock_summary, name='pool-stock-summary'),
    path('pool-stock/<int:pk>/', pool_stock_detail, name='pool-stock-detail'),
    path('pool-stock/<int:pk>/txns/', pool_stock_txns, name='pool-stock-txns'),
]
