from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from .models import ProductModel, Color
from .serializers import ProductModelSerializer, ColorSerializer


def _list_or_create(request, model, serializer_class):
    if request.method == 'GET':
        queryset = model.objects.all()
        # dealers only ever see what they can order
        if not request.user.is_admin_role:
            queryset = queryset.filter(is_active=True)
        return Response(serializer_class(queryset, many=True).data)

    if not request.user.is_admin_role:
        return Response({'error': 'Admin role required.'}, status=status.HTTP_403_FORBIDDEN)
    serializer = serializer_class(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_model_list_create(request):
    """List pool models or create a new one (admin)"""
    return _list_or_create(request, ProductModel, ProductModelSerializer)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def color_list_create(request):
    """List colors or create a new one (admin)"""
    return _list_or_create(request, Color, ColorSerializer)
