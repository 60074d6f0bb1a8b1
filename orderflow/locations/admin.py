from django.contrib import admin
from .models import Factory, InventoryLocation


@admin.register(Factory)
class FactoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'state', 'is_active', 'created_at']
    list_filter = ['is_active', 'state']
    search_fields = ['name', 'city']
    ordering = ['name']


@admin.register(InventoryLocation)
class InventoryLocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'location_type', 'factory', 'is_active']
    list_filter = ['location_type', 'is_active']
    search_fields = ['name']
    ordering = ['name']
