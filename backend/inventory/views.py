from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, paginated_response_data
from .models import StockAdjustment
from .serializers import StockAdjustmentSerializer, StockAdjustmentCreateSerializer
from .services import adjust_stock


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_adjustment_list_create(request):
    """List stock adjustments or create a manual adjustment"""
    if request.method == 'GET':
        queryset = StockAdjustment.objects.select_related('product', 'created_by')
        product = request.query_params.get('product', None)
        reason = request.query_params.get('reason', None)
        reference = request.query_params.get('reference', None)
        if product:
            queryset = queryset.filter(product_id=product)
        if reason:
            queryset = queryset.filter(reason=reason)
        if reference:
            queryset = queryset.filter(reference=reference)
        queryset = queryset.order_by('-created_at', '-id')
        return Response(paginated_response_data(request, queryset, StockAdjustmentSerializer))

    serializer = StockAdjustmentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    product = serializer.validated_data['product']
    adjustment = adjust_stock(
        product.id,
        serializer.get_delta(),
        user=request.user,
        reason=serializer.validated_data['reason'],
        notes=serializer.validated_data['notes'],
    )

    create_audit_log(
        request=request,
        action='stock_adjust',
        model_name='StockAdjustment',
        object_id=adjustment.id,
        object_name=product.name,
        object_reference=product.sku,
        changes={
            'product': product.name,
            'adjustment_type': adjustment.adjustment_type,
            'quantity': adjustment.quantity,
            'quantity_after': adjustment.quantity_after,
            'reason': adjustment.reason,
            'notes': adjustment.notes,
        }
    )

    return Response(StockAdjustmentSerializer(adjustment).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_adjustment_detail(request, pk):
    """Retrieve a stock adjustment"""
    adjustment = get_object_or_404(StockAdjustment, pk=pk)
    return Response(StockAdjustmentSerializer(adjustment).data)
