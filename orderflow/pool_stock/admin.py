from django.contrib import admin
from .models import PoolStock, PoolStockTxn


@admin.register(PoolStock)
class PoolStockAdmin(admin.ModelAdmin):
    list_display = ['factory', 'product_model', 'color', 'condition', 'quantity', 'eta', 'updated_at']
    list_filter = ['factory', 'condition']
    search_fields = ['product_model__name', 'color__name', 'factory__name']
    readonly_fields = ['quantity', 'color_key', 'created_at', 'updated_at']


@admin.register(PoolStockTxn)
class PoolStockTxnAdmin(admin.ModelAdmin):
    list_display = ['stock', 'kind', 'quantity', 'delta', 'order', 'actor', 'created_at']
    list_filter = ['kind', 'created_at']
    search_fields = ['notes', 'stock__product_model__name']
    ordering = ['-created_at']

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
