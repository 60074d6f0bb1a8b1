from django.urls import path
from .views import factory_list_create, inventory_location_list_create

urlpatterns = [
    path('factories/', factory_list_create, name='factory-list-create'),
    path('inventory/locations/', inventory_location_list_create, name='inventory-location-list-create'),
]
