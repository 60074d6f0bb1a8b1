from django.urls import path
from .views import product_model_list_create, color_list_create

urlpatterns = [
    path('catalog/product-models/', product_model_list_create, name='product-model-list-create'),
    path('catalog/colors/', color_list_create, name='color-list-create'),
]
