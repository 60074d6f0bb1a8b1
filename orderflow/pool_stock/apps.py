from django.apps import AppConfig


class PoolStockConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'orderflow.pool_stock'
