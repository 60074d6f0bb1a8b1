from django.contrib import admin
from .models import Dealer


@admin.register(Dealer)
class DealerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'city', 'state', 'is_approved', 'created_at']
    list_filter = ['is_approved', 'state']
    search_fields = ['name', 'email', 'phone']
    ordering = ['name']
