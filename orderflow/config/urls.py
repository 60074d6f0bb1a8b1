"""
URL configuration for the orderflow project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Orderflow Admin Panel"
admin.site.site_title = "Orderflow Admin Portal"
admin.site.index_title = "Dealer orders and production stock"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('orderflow.core.urls')),
    path('api/v1/', include('orderflow.locations.urls')),
    path('api/v1/', include('orderflow.catalog.urls')),
    path('api/v1/', include('orderflow.parties.urls')),
    path('api/v1/', include('orderflow.orders.urls')),
    path('api/v1/', include('orderflow.inventory.urls')),
    path('api/v1/', include('orderflow.pool_stock.urls')),
]
