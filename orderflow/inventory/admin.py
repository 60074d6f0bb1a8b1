from django.contrib import admin
from .models import InventoryItem, InventoryStock, InventoryTxn


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'unit', 'min_stock', 'is_active']
    list_filter = ['is_active', 'unit']
    search_fields = ['sku', 'name']
    ordering = ['name']


@admin.register(InventoryStock)
class InventoryStockAdmin(admin.ModelAdmin):
    list_display = ['item', 'location', 'quantity', 'updated_at']
    list_filter = ['location']
    search_fields = ['item__sku', 'item__name', 'location__name']
    # quantity only moves through ledger txns
    readonly_fields = ['quantity', 'created_at', 'updated_at']


@admin.register(InventoryTxn)
class InventoryTxnAdmin(admin.ModelAdmin):
    list_display = ['stock', 'kind', 'quantity', 'delta', 'order', 'actor', 'created_at']
    list_filter = ['kind', 'created_at']
    search_fields = ['stock__item__sku', 'notes']
    ordering = ['-created_at']

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
