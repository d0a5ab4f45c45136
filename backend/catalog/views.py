from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, paginated_response_data
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products (filterable) or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.all().order_by('name', 'id')
        queryset = ProductFilter(request.query_params, queryset=queryset).qs
        return Response(paginated_response_data(request, queryset, ProductSerializer))
    else:
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=product.id,
                object_name=product.name,
                object_reference=product.sku,
                changes={'price': str(product.price), 'cost_price': str(product.cost_price)},
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve or update a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)

    old_price = product.price
    old_cost_price = product.cost_price
    serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        product = serializer.save()
        changes = {}
        if product.price != old_price:
            changes['price'] = {'old': str(old_price), 'new': str(product.price)}
        if product.cost_price != old_cost_price:
            changes['cost_price'] = {'old': str(old_cost_price), 'new': str(product.cost_price)}
        create_audit_log(
            request=request,
            action='update',
            model_name='Product',
            object_id=product.id,
            object_name=product.name,
            object_reference=product.sku,
            changes=changes,
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
