from rest_framework import serializers
from .models import Factory, InventoryLocation


class FactorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Factory
        fields = ['id', 'name', 'city', 'state', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class InventoryLocationSerializer(serializers.ModelSerializer):
    factory_name = serializers.CharField(source='factory.name', read_only=True, default=None)

    class Meta:
        model = InventoryLocation
        fields = ['id', 'name', 'location_type', 'factory', 'factory_name', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
