import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from orderflow.core.exceptions import OrderflowError
from orderflow.core.permissions import IsAdminRole
from orderflow.core.utils import error_response, parse_bool, parse_limit
from .filters import PoolStockFilter
from .models import PoolStock
from .serializers import InStockSerializer, PoolStockSerializer, PoolStockTxnSerializer, PoolStockReceiveSerializer, PoolStockMoveSerializer
from . import services

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pool_stock_list_create(request):
    """List finished-goods rows (empty rows hidden unless include_zero) or receive stock"""
    if request.method == 'GET':
        queryset = PoolStock.objects.select_related('factory', 'product_model', 'color')
        if not parse_bool(request.query_params.get('include_zero'), default=False):
            queryset = queryset.filter(quantity__gt=0)
        filterset = PoolStockFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(PoolStockSerializer(filterset.qs, many=True).data)

    serializer = PoolStockReceiveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        movement, created = services.receive_stock(
            data['factory'], data['product_model'],
            color_id=data.get('color'),
            condition=data['condition'],
            quantity=data['quantity'],
            eta=data.get('eta'),
            notes=data.get('notes'),
            actor=request.user,
            request=request,
        )
    except OrderflowError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error receiving pool stock: {str(e)}", exc_info=True)
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'stock': PoolStockSerializer(movement.row).data,
        'txn': PoolStockTxnSerializer(movement.txn).data if movement.txn else None,
    }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pool_stock_detail(request, pk):
    try:
        row = services.pool_stock_ledger.get_row(pk)
    except OrderflowError as e:
        return error_response(e)
    return Response(PoolStockSerializer(row).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pool_stock_txns(request, pk):
    """Txns of one row, newest first, or apply a movement to it"""
    if request.method == 'GET':
        try:
            row = services.pool_stock_ledger.get_row(pk)
        except OrderflowError as e:
            return error_response(e)
        order_id = request.query_params.get('order') or None
        if order_id is not None and not order_id.isdigit():
            return Response({'error': 'order must be an order id'}, status=status.HTTP_400_BAD_REQUEST)
        limit = parse_limit(
            request.query_params.get('limit'),
            settings.LEDGER_TXN_DEFAULT_LIMIT,
            settings.LEDGER_TXN_MAX_LIMIT,
        )
        txns = services.pool_stock_ledger.recent_txns(
            row=row,
            kind=request.query_params.get('kind') or None,
            order=order_id,
            limit=limit,
        )
        return Response(PoolStockTxnSerializer(txns, many=True).data)

    serializer = PoolStockMoveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        movement = services.move_pool_stock(
            pk, data['kind'], data['quantity'],
            order_id=data.get('order'),
            notes=data.get('notes', ''),
            actor=request.user,
            request=request,
        )
    except OrderflowError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error moving pool stock {pk}: {str(e)}", exc_info=True)
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'stock': PoolStockSerializer(movement.row).data,
        'txn': PoolStockTxnSerializer(movement.txn).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pool_stock_summary(request):
    """Totals per factory per condition"""
    return Response(services.summary())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pool_stock_in_stock(request):
    """Ready-to-ship pools dealers can order from, filtered by factory, model and color"""
    queryset = PoolStock.objects.select_related('factory', 'product_model', 'color').filter(
        condition=PoolStock.CONDITION_READY,
        quantity__gt=0,
    ).order_by('factory__name', 'product_model__name', 'color__name', 'id')
    params = request.query_params.copy()
    params.pop('condition', None)
    filterset = PoolStockFilter(params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(InStockSerializer(filterset.qs, many=True).data)
