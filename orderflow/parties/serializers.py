from rest_framework import serializers
from .models import Dealer


class DealerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Dealer
        fields = ['id', 'name', 'email', 'phone', 'address', 'city', 'state', 'is_approved', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
