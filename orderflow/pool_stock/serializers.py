from rest_framework import serializers
from orderflow.ledger.models import TxnKind
from .models import PoolStock, PoolStockTxn


class PoolStockSerializer(serializers.ModelSerializer):
    factory_name = serializers.CharField(source='factory.name', read_only=True)
    product_model_name = serializers.CharField(source='product_model.name', read_only=True)
    color_name = serializers.CharField(source='color.name', read_only=True, default=None)

    class Meta:
        model = PoolStock
        fields = ['id', 'factory', 'factory_name', 'product_model', 'product_model_name', 'color', 'color_name',
                  'condition', 'quantity', 'eta', 'notes', 'created_at', 'updated_at']
        read_only_fields = fields


class InStockSerializer(serializers.ModelSerializer):
    """Dealer-facing view of a READY pool; internal notes are left out"""
    factory_name = serializers.CharField(source='factory.name', read_only=True)
    factory_city = serializers.CharField(source='factory.city', read_only=True)
    factory_state = serializers.CharField(source='factory.state', read_only=True)
    product_model_name = serializers.CharField(source='product_model.name', read_only=True)
    color_name = serializers.CharField(source='color.name', read_only=True, default=None)

    class Meta:
        model = PoolStock
        fields = ['id', 'factory', 'factory_name', 'factory_city', 'factory_state', 'product_model',
                  'product_model_name', 'color', 'color_name', 'condition', 'quantity', 'eta']
        read_only_fields = fields


class PoolStockTxnSerializer(serializers.ModelSerializer):
    actor = serializers.CharField(source='actor.username', read_only=True, default=None)

    class Meta:
        model = PoolStockTxn
        fields = ['id', 'stock', 'kind', 'quantity', 'delta', 'order', 'notes', 'actor', 'created_at']
        read_only_fields = fields


class PoolStockReceiveSerializer(serializers.Serializer):
    factory = serializers.IntegerField()
    product_model = serializers.IntegerField()
    color = serializers.IntegerField(required=False, allow_null=True)
    condition = serializers.ChoiceField(choices=PoolStock.CONDITION_CHOICES, default=PoolStock.CONDITION_READY)
    quantity = serializers.IntegerField(min_value=0, default=0)
    eta = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PoolStockMoveSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=[TxnKind.RESERVE, TxnKind.RELEASE, TxnKind.SHIP, TxnKind.ADD, TxnKind.ADJUST])
    quantity = serializers.IntegerField()
    order = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
