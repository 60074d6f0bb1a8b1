from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from orderflow.core.permissions import IsAdminRole
from orderflow.core.utils import parse_bool
from .models import Dealer
from .serializers import DealerSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def dealer_list_create(request):
    """List dealers or register a new one"""
    if request.method == 'GET':
        queryset = Dealer.objects.all()
        approved = request.query_params.get('approved')
        if approved is not None:
            queryset = queryset.filter(is_approved=parse_bool(approved))
        return Response(DealerSerializer(queryset, many=True).data)

    serializer = DealerSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def dealer_detail(request, pk):
    """Retrieve or update a dealer"""
    dealer = get_object_or_404(Dealer, pk=pk)
    if request.method == 'GET':
        return Response(DealerSerializer(dealer).data)

    serializer = DealerSerializer(dealer, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
