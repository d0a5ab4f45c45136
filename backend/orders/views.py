from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import paginated_response_data
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderStatusSerializer, OrderPaymentStatusSerializer
)
from . import services


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """Search orders or create a new order"""
    if request.method == 'GET':
        queryset = services.search_orders(request.query_params)
        return Response(paginated_response_data(request, queryset, OrderSerializer))

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    order = services.create_order(
        customer_id=data['customer'],
        items=data['items'],
        user=request.user,
        status=data.get('status'),
        customer_notes=data.get('customer_notes'),
    )
    order = services.get_order(order.id)
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve an order with its items"""
    order = services.get_order(pk)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_cancel(request, pk):
    """Cancel an order. Stock and payments are not touched."""
    order = services.cancel_order(pk, user=request.user)
    return Response(OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_status(request, pk):
    """Set the order status"""
    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = services.update_order_status(pk, serializer.validated_data['status'], user=request.user)
    return Response(OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_payment_status(request, pk):
    """Set the order payment status"""
    serializer = OrderPaymentStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = services.update_payment_status(pk, serializer.validated_data['payment_status'], user=request.user)
    return Response(OrderSerializer(order).data)
