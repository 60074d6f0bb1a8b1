import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from orderflow.core.exceptions import NotFound, OrderflowError, ValidationFailed
from orderflow.core.permissions import IsAdminRole, IsDealer
from orderflow.core.utils import error_response
from orderflow.parties.models import Dealer
from .checker import check_order_for_status
from .filters import OrderFilter
from .flow import parse_status
from .models import Order, OrderHistory, OrderMedia, Notification
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderUpdateSerializer, OrderScheduleSerializer,
    OrderFactorySerializer, StatusChangeSerializer, OrderHistorySerializer, OrderMediaSerializer,
    NotificationSerializer,
)
from . import services

logger = logging.getLogger(__name__)

ORDER_RELATED = ('dealer', 'product_model', 'color', 'factory')


def _visible_orders(user):
    queryset = Order.objects.select_related(*ORDER_RELATED)
    if user.is_admin_role:
        return queryset
    return queryset.filter(dealer_id=user.dealer_id) if user.dealer_id else queryset.none()


def _get_order(request, pk):
    try:
        return _visible_orders(request.user).get(pk=pk)
    except Order.DoesNotExist:
        raise NotFound(f"Order {pk} not found")


def _internal_error(where, e):
    logger.error(f"Unexpected error in {where}: {str(e)}", exc_info=True)
    return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders (admin: all, dealer: own) or submit a new order"""
    if request.method == 'GET':
        filterset = OrderFilter(request.query_params, queryset=_visible_orders(request.user))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(OrderSerializer(filterset.qs, many=True).data)

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if request.user.is_admin_role and request.data.get('dealer'):
        dealer = Dealer.objects.filter(pk=request.data.get('dealer')).first()
        if dealer is None:
            return Response({'error': 'Dealer not found'}, status=status.HTTP_404_NOT_FOUND)
    elif request.user.dealer_id:
        dealer = request.user.dealer
    else:
        return Response({'error': 'A dealer account is required to submit orders'}, status=status.HTTP_403_FORBIDDEN)

    try:
        order = services.create_order(actor=request.user, request=request, dealer=dealer, **serializer.validated_data)
    except OrderflowError as e:
        return error_response(e)
    except Exception as e:
        return _internal_error('order_list_create', e)
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve an order or (admin) edit its scalar fields"""
    try:
        order = _get_order(request, pk)
    except NotFound as e:
        return error_response(e)

    if request.method == 'GET':
        return Response(OrderSerializer(order).data)

    if not request.user.is_admin_role:
        return Response({'error': 'Admin role required.'}, status=status.HTTP_403_FORBIDDEN)
    if 'status' in request.data:
        return error_response(ValidationFailed('status changes go through the status endpoint', field='status'))

    serializer = OrderUpdateSerializer(order, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = services.update_order_fields(order.pk, serializer.validated_data, actor=request.user, request=request)
    except OrderflowError as e:
        return error_response(e)
    return Response(OrderSerializer(order).data)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def order_status(request, pk):
    """Request a status transition; a blocked forward move answers 422 with the gaps"""
    serializer = StatusChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = services.request_transition(
            pk,
            serializer.validated_data['status'],
            comment=serializer.validated_data.get('comment', ''),
            actor=request.user,
            request=request,
        )
    except OrderflowError as e:
        return error_response(e)
    except Exception as e:
        return _internal_error('order_status', e)

    order = Order.objects.select_related(*ORDER_RELATED).get(pk=result.order.pk)
    return Response({
        'order': OrderSerializer(order).data,
        'history': OrderHistorySerializer(result.history).data,
        'previous_status': result.previous_status,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_requirements(request, pk):
    """Preview what a move to ?target= still needs"""
    target = parse_status(request.query_params.get('target', ''))
    if target is None:
        return error_response(ValidationFailed('target must be a valid status', field='target'))
    try:
        order = _get_order(request, pk)
        report = check_order_for_status(order, target)
    except OrderflowError as e:
        return error_response(e)
    payload = report.as_dict()
    payload['is_satisfied'] = report.is_satisfied
    return Response(payload)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_history(request, pk):
    """History of an order, newest first"""
    try:
        order = _get_order(request, pk)
    except NotFound as e:
        return error_response(e)
    history = OrderHistory.objects.filter(order=order).select_related('actor').order_by('-created_at', '-id')
    return Response(OrderHistorySerializer(history, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def order_history_comment(request, pk):
    """Add a comment row that re-records the current status"""
    try:
        result = services.add_comment(pk, request.data.get('comment'), actor=request.user, request=request)
    except OrderflowError as e:
        return error_response(e)
    return Response(OrderHistorySerializer(result.history).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_media(request, pk):
    """List or attach order documents; dealers only see and add dealer-visible media"""
    try:
        order = _get_order(request, pk)
    except NotFound as e:
        return error_response(e)

    if request.method == 'GET':
        media = OrderMedia.objects.filter(order=order)
        if not request.user.is_admin_role:
            media = media.filter(visible_to_dealer=True)
        return Response(OrderMediaSerializer(media, many=True).data)

    serializer = OrderMediaSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    visible = data.get('visible_to_dealer', True) if request.user.is_admin_role else True
    try:
        media = services.attach_media(
            order.pk,
            data['file_url'],
            doc_type=data.get('doc_type') or None,
            media_type=data.get('media_type', 'update'),
            visible_to_dealer=visible,
            actor=request.user,
            request=request,
        )
    except OrderflowError as e:
        return error_response(e)
    return Response(OrderMediaSerializer(media).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def order_schedule(request, pk):
    """Set production priority (clamped to 1..9999) and requested ship date"""
    serializer = OrderScheduleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    fields = {}
    if 'production_priority' in serializer.validated_data:
        fields['production_priority'] = services.clamp_priority(serializer.validated_data['production_priority'])
    if 'requested_ship_date' in serializer.validated_data:
        fields['requested_ship_date'] = serializer.validated_data['requested_ship_date']
    try:
        order = services.update_order_fields(pk, fields, actor=request.user, request=request, action='order_schedule')
    except OrderflowError as e:
        return error_response(e)
    return Response(OrderSerializer(order).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def order_factory(request, pk):
    """Assign the producing factory and shipping method"""
    serializer = OrderFactorySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    fields = {'factory': serializer.validated_data['factory']}
    if 'shipping_method' in serializer.validated_data:
        fields['shipping_method'] = serializer.validated_data['shipping_method'].strip()
    try:
        order = services.update_order_fields(pk, fields, actor=request.user, request=request)
    except OrderflowError as e:
        return error_response(e)
    return Response(OrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDealer])
def notification_list(request):
    """Dealer notifications, newest first"""
    notifications = Notification.objects.filter(dealer_id=request.user.dealer_id)
    if request.query_params.get('unread') == 'true':
        notifications = notifications.filter(read_at__isnull=True)
    return Response(NotificationSerializer(notifications[:100], many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDealer])
def notification_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, dealer_id=request.user.dealer_id)
    if notification.read_at is None:
        notification.read_at = timezone.now()
        notification.save(update_fields=['read_at'])
    return Response(NotificationSerializer(notification).data)
