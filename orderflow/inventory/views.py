import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from django.db import IntegrityError
from orderflow.core.exceptions import OrderflowError
from orderflow.core.permissions import IsAdminRole
from orderflow.core.utils import error_response, parse_bool, parse_limit
from .filters import InventoryStockFilter, InventoryTxnFilter
from .models import InventoryItem, InventoryStock, InventoryTxn
from .serializers import (
    InventoryItemSerializer, InventoryStockSerializer, InventoryTxnSerializer,
    InventoryMoveSerializer, InventoryCountSerializer,
)
from . import services

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def item_list_create(request):
    """List raw-material items or create a new one"""
    if request.method == 'GET':
        queryset = InventoryItem.objects.all()
        active = request.query_params.get('active')
        if active is not None:
            queryset = queryset.filter(is_active=parse_bool(active))
        return Response(InventoryItemSerializer(queryset, many=True).data)

    serializer = InventoryItemSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        item = serializer.save()
    except IntegrityError as e:
        logger.error(f"IntegrityError creating inventory item: {str(e)}", exc_info=True)
        return Response({'error': 'An item with this SKU already exists'}, status=status.HTTP_409_CONFLICT)
    logger.info(f"Inventory item {item.sku} created by {request.user.username}")
    return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def stock_list(request):
    """On-hand per item and location; ?low=true keeps rows under the item minimum"""
    if parse_bool(request.query_params.get('low'), default=False):
        queryset = services.low_stock()
    else:
        queryset = InventoryStock.objects.select_related('item', 'location')
    filterset = InventoryStockFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(InventoryStockSerializer(filterset.qs, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def txn_list_create(request):
    """Recent raw-material txns (newest first) or record a movement"""
    if request.method == 'GET':
        queryset = InventoryTxn.objects.select_related('stock__item', 'stock__location', 'order', 'actor')
        filterset = InventoryTxnFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        limit = parse_limit(
            request.query_params.get('limit'),
            settings.LEDGER_TXN_DEFAULT_LIMIT,
            settings.LEDGER_TXN_MAX_LIMIT,
        )
        txns = filterset.qs.order_by('-created_at', '-id')[:limit]
        return Response(InventoryTxnSerializer(txns, many=True).data)

    serializer = InventoryMoveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        movement = services.move_inventory(
            data['item'], data['location'], data['kind'], data['quantity'],
            order_id=data.get('order'),
            notes=data.get('notes', ''),
            actor=request.user,
            request=request,
        )
    except OrderflowError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error recording inventory txn: {str(e)}", exc_info=True)
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'stock': InventoryStockSerializer(movement.row).data,
        'txn': InventoryTxnSerializer(movement.txn).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def count_adjust(request):
    """Daily count: set the absolute on-hand for an item at a location"""
    serializer = InventoryCountSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        movement = services.count_adjust(
            data['item'], data['location'], data['quantity'],
            notes=data.get('notes', ''),
            actor=request.user,
            request=request,
        )
    except OrderflowError as e:
        return error_response(e)

    return Response({
        'stock': InventoryStockSerializer(movement.row).data,
        'txn': InventoryTxnSerializer(movement.txn).data if movement.txn else None,
        'changed': movement.txn is not None,
    })
