from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import paginated_response_data
from backend.orders.services import get_order
from .serializers import (
    PaymentSerializer, PaymentCreateSerializer, PaymentUpdateSerializer, PaymentRefundSerializer
)
from . import services


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payment_list_create(request):
    """Search payments (order, status, start_date, end_date) or record a payment"""
    if request.method == 'GET':
        queryset = services.search_payments(request.query_params)
        return Response(paginated_response_data(request, queryset, PaymentSerializer))

    serializer = PaymentCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    payment = services.create_payment(
        order_id=data['order'],
        amount=data['amount'],
        payment_method=data['payment_method'],
        user=request.user,
        notes=data.get('notes'),
        transaction_id=data.get('transaction_id'),
    )
    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payment_detail(request, pk):
    """Retrieve, partially update or soft-delete a payment"""
    if request.method == 'GET':
        payment = services.get_payment(pk)
        return Response(PaymentSerializer(payment).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PaymentUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        payment = services.update_payment(pk, user=request.user, **serializer.validated_data)
        return Response(PaymentSerializer(payment).data)
    else:  # DELETE
        services.delete_payment(pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def payment_refund(request, pk):
    """Refund a completed payment"""
    serializer = PaymentRefundSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    refund = services.refund_payment(pk, user=request.user, notes=serializer.validated_data.get('notes'))
    return Response(PaymentSerializer(refund).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_payments(request, order_id):
    """All payments of an order with the paid total and remaining balance"""
    order = get_order(order_id)
    payments = services.get_payments_for_order(order.id)
    total_paid = services.get_total_paid(order.id)
    return Response({
        'order': order.id,
        'order_number': order.order_number,
        'total_amount': str(order.total_amount),
        'total_paid': str(total_paid),
        'balance': str(max(order.total_amount - total_paid, Decimal('0.00'))),
        'payment_status': order.payment_status,
        'payments': PaymentSerializer(payments, many=True).data,
    })
