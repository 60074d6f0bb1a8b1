from rest_framework import serializers
from .models import ProductModel, Color


class ProductModelSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductModel
        fields = ['id', 'name', 'length_ft', 'width_ft', 'depth_ft', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ColorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Color
        fields = ['id', 'name', 'swatch_url', 'is_active', 'created_at']
        read_only_fields = ['created_at']
