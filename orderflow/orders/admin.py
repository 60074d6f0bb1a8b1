from django.contrib import admin
from .models import Order, OrderHistory, OrderMedia, Notification


class OrderHistoryInline(admin.TabularInline):
    model = OrderHistory
    extra = 0
    can_delete = False
    readonly_fields = ['status', 'comment', 'actor', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False


class OrderMediaInline(admin.TabularInline):
    model = OrderMedia
    extra = 0
    can_delete = False
    readonly_fields = ['file_url', 'doc_type', 'media_type', 'visible_to_dealer', 'uploaded_by', 'uploaded_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'dealer', 'product_model', 'color', 'factory', 'status', 'production_priority', 'requested_ship_date', 'created_at']
    list_filter = ['status', 'factory', 'created_at']
    search_fields = ['serial_number', 'dealer__name', 'delivery_address']
    ordering = ['-created_at']
    readonly_fields = ['status', 'created_at', 'updated_at']
    inlines = [OrderHistoryInline, OrderMediaInline]


@admin.register(OrderHistory)
class OrderHistoryAdmin(admin.ModelAdmin):
    list_display = ['order', 'status', 'actor', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order__id', 'comment']
    ordering = ['-created_at']
    readonly_fields = ['order', 'status', 'comment', 'actor', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(OrderMedia)
class OrderMediaAdmin(admin.ModelAdmin):
    list_display = ['order', 'doc_type', 'media_type', 'visible_to_dealer', 'uploaded_by', 'uploaded_at']
    list_filter = ['doc_type', 'media_type', 'visible_to_dealer']
    ordering = ['-uploaded_at']

    # attachments are append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['dealer', 'order', 'title', 'read_at', 'created_at']
    list_filter = ['read_at', 'created_at']
    ordering = ['-created_at']
