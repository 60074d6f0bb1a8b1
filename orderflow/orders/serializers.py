from rest_framework import serializers
from orderflow.catalog.models import ProductModel, Color
from orderflow.locations.models import Factory
from .flow import status_label
from .models import Order, OrderHistory, OrderMedia, Notification
from .requirements import DocType, label_doc_type


class OrderSerializer(serializers.ModelSerializer):
    dealer_name = serializers.CharField(source='dealer.name', read_only=True)
    product_model_name = serializers.CharField(source='product_model.name', read_only=True)
    color_name = serializers.CharField(source='color.name', read_only=True, default=None)
    factory_name = serializers.CharField(source='factory.name', read_only=True, default=None)
    status_label = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ['id', 'dealer', 'dealer_name', 'product_model', 'product_model_name', 'color', 'color_name',
                  'factory', 'factory_name', 'status', 'status_label', 'delivery_address', 'payment_proof_url',
                  'serial_number', 'requested_ship_date', 'production_priority', 'shipping_method',
                  'hardware_skimmer', 'hardware_returns', 'hardware_autocover', 'hardware_main_drains',
                  'notes', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_status_label(self, obj):
        return status_label(obj.status)


class OrderCreateSerializer(serializers.ModelSerializer):
    """Dealer intake payload; dealer and status are set by the server"""
    product_model = serializers.PrimaryKeyRelatedField(queryset=ProductModel.objects.filter(is_active=True))
    color = serializers.PrimaryKeyRelatedField(queryset=Color.objects.filter(is_active=True), required=False, allow_null=True)

    class Meta:
        model = Order
        fields = ['product_model', 'color', 'delivery_address', 'payment_proof_url', 'requested_ship_date',
                  'shipping_method', 'hardware_skimmer', 'hardware_returns', 'hardware_autocover',
                  'hardware_main_drains', 'notes']

    def validate_delivery_address(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError('Delivery address is required')
        return value.strip()


class OrderUpdateSerializer(serializers.ModelSerializer):
    """Admin edits of scalar order data"""
    class Meta:
        model = Order
        fields = ['delivery_address', 'payment_proof_url', 'serial_number', 'shipping_method',
                  'hardware_skimmer', 'hardware_returns', 'hardware_autocover', 'hardware_main_drains', 'notes']


class OrderScheduleSerializer(serializers.Serializer):
    production_priority = serializers.IntegerField(required=False, allow_null=True)
    requested_ship_date = serializers.DateField(required=False, allow_null=True)


class OrderFactorySerializer(serializers.Serializer):
    factory = serializers.PrimaryKeyRelatedField(queryset=Factory.objects.filter(is_active=True), allow_null=True)
    shipping_method = serializers.CharField(required=False, allow_blank=True, max_length=50)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class OrderHistorySerializer(serializers.ModelSerializer):
    actor = serializers.CharField(source='actor.username', read_only=True, default=None)
    status_label = serializers.SerializerMethodField()

    class Meta:
        model = OrderHistory
        fields = ['id', 'order', 'status', 'status_label', 'comment', 'actor', 'created_at']

    def get_status_label(self, obj):
        return status_label(obj.status)


class OrderMediaSerializer(serializers.ModelSerializer):
    doc_type = serializers.ChoiceField(choices=DocType.choices, required=False, allow_null=True, allow_blank=True)
    doc_type_label = serializers.SerializerMethodField()

    class Meta:
        model = OrderMedia
        fields = ['id', 'order', 'file_url', 'media_type', 'doc_type', 'doc_type_label', 'visible_to_dealer',
                  'uploaded_at']
        read_only_fields = ['order', 'uploaded_at']

    def get_doc_type_label(self, obj):
        return label_doc_type(obj.doc_type)


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'order', 'title', 'message', 'read_at', 'created_at']
