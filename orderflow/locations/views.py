import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError
from orderflow.core.permissions import IsAdminRole
from orderflow.core.utils import parse_bool
from .models import Factory, InventoryLocation
from .serializers import FactorySerializer, InventoryLocationSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def factory_list_create(request):
    """List factories or create a new one"""
    if request.method == 'GET':
        queryset = Factory.objects.all()
        active = request.query_params.get('active')
        if active is not None:
            queryset = queryset.filter(is_active=parse_bool(active))
        return Response(FactorySerializer(queryset, many=True).data)

    serializer = FactorySerializer(data=request.data)
    if serializer.is_valid():
        try:
            factory = serializer.save()
        except IntegrityError as e:
            logger.error(f"IntegrityError creating factory: {str(e)}", exc_info=True)
            return Response({'error': 'A factory with this name already exists'}, status=status.HTTP_409_CONFLICT)
        logger.info(f"Factory '{factory.name}' created by {request.user.username}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def inventory_location_list_create(request):
    """List raw-material locations or create a new one"""
    if request.method == 'GET':
        queryset = InventoryLocation.objects.select_related('factory').all()
        location_type = request.query_params.get('type')
        active = request.query_params.get('active')
        if location_type:
            queryset = queryset.filter(location_type=location_type)
        if active is not None:
            queryset = queryset.filter(is_active=parse_bool(active))
        return Response(InventoryLocationSerializer(queryset, many=True).data)

    serializer = InventoryLocationSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
