from rest_framework import serializers
from orderflow.ledger.models import TxnKind
from .models import InventoryItem, InventoryStock, InventoryTxn


class InventoryItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryItem
        fields = ['id', 'sku', 'name', 'unit', 'min_stock', 'is_active', 'created_at']
        read_only_fields = ['created_at']

    def validate_sku(self, value):
        return value.strip().upper()


class InventoryStockSerializer(serializers.ModelSerializer):
    item_sku = serializers.CharField(source='item.sku', read_only=True)
    item_name = serializers.CharField(source='item.name', read_only=True)
    unit = serializers.CharField(source='item.unit', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    is_low = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryStock
        fields = ['id', 'item', 'item_sku', 'item_name', 'unit', 'location', 'location_name',
                  'quantity', 'is_low', 'updated_at']
        read_only_fields = fields


class InventoryTxnSerializer(serializers.ModelSerializer):
    item = serializers.IntegerField(source='stock.item_id', read_only=True)
    item_sku = serializers.CharField(source='stock.item.sku', read_only=True)
    location = serializers.IntegerField(source='stock.location_id', read_only=True)
    location_name = serializers.CharField(source='stock.location.name', read_only=True)
    actor = serializers.CharField(source='actor.username', read_only=True, default=None)

    class Meta:
        model = InventoryTxn
        fields = ['id', 'stock', 'item', 'item_sku', 'location', 'location_name', 'kind', 'quantity',
                  'delta', 'order', 'notes', 'actor', 'created_at']
        read_only_fields = fields


class InventoryMoveSerializer(serializers.Serializer):
    item = serializers.IntegerField()
    location = serializers.IntegerField()
    kind = serializers.ChoiceField(choices=[TxnKind.IN, TxnKind.OUT, TxnKind.ADJUST])
    quantity = serializers.IntegerField()
    order = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class InventoryCountSerializer(serializers.Serializer):
    item = serializers.IntegerField()
    location = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
