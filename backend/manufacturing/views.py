from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, paginated_response_data
from .models import Recipe, ProductionOrder
from .serializers import (
    RecipeSerializer, ProductionOrderSerializer, ProductionOrderDetailSerializer,
    ProductionOrderCreateSerializer, ProductionOrderStatusSerializer,
    IssueMaterialsSerializer, ReceiveOutputSerializer, CompletedQuantitySerializer
)
from . import services


# Recipe views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def recipe_list_create(request):
    """List all recipes or create a new recipe"""
    if request.method == 'GET':
        recipes = Recipe.objects.select_related('product').prefetch_related('items__product')
        serializer = RecipeSerializer(recipes, many=True)
        return Response(serializer.data)
    else:
        serializer = RecipeSerializer(data=request.data)
        if serializer.is_valid():
            recipe = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Recipe',
                object_id=recipe.id,
                object_name=recipe.name,
                changes={'product': recipe.product_id, 'items': recipe.items.count()},
            )
            return Response(RecipeSerializer(services.get_recipe(recipe.id)).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def recipe_detail(request, pk):
    """Retrieve, update (items are replaced) or delete a recipe"""
    recipe = services.get_recipe(pk)

    if request.method == 'GET':
        serializer = RecipeSerializer(recipe)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RecipeSerializer(recipe, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Recipe',
                object_id=recipe.id,
                object_name=recipe.name,
            )
            return Response(RecipeSerializer(services.get_recipe(recipe.id)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if recipe.production_orders.exists():
            return Response({'error': 'Recipe is used by production orders and cannot be deleted'},
                            status=status.HTTP_409_CONFLICT)
        recipe_id, recipe_name = recipe.id, recipe.name
        recipe.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Recipe',
            object_id=recipe_id,
            object_name=recipe_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recipe_duplicate(request, pk):
    """Copy a recipe with its items"""
    recipe = services.duplicate_recipe(pk)
    return Response(RecipeSerializer(recipe).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recipe_completed(request, pk):
    """Add to a recipe's manually tracked completed quantity"""
    serializer = CompletedQuantitySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    recipe = services.add_completed_quantity(pk, serializer.validated_data['amount'])
    return Response(RecipeSerializer(recipe).data)


# Production order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def production_order_list_create(request):
    """List all production orders or create a draft production order"""
    if request.method == 'GET':
        orders = ProductionOrder.objects.select_related('recipe').order_by('-created_at', '-id')
        serializer = ProductionOrderSerializer(orders, many=True)
        return Response(serializer.data)

    serializer = ProductionOrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    order = services.create_production_order(
        recipe_id=data['recipe'],
        work_center=data['work_center'],
        planned_quantity=data['planned_quantity'],
        user=request.user,
    )
    return Response(ProductionOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def production_order_page(request):
    """Paginated production orders filtered by status, start_date and end_date"""
    queryset = services.search_production_orders(
        status=request.query_params.get('status'),
        start_date=request.query_params.get('start_date') or request.query_params.get('from'),
        end_date=request.query_params.get('end_date') or request.query_params.get('to'),
    )
    return Response(paginated_response_data(request, queryset, ProductionOrderSerializer))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def production_order_detail(request, pk):
    """Retrieve a production order with its issues, outputs and batches"""
    order = get_object_or_404(
        ProductionOrder.objects.select_related('recipe').prefetch_related('material_issues', 'outputs', 'batches'),
        pk=pk
    )
    return Response(ProductionOrderDetailSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def production_order_status(request, pk):
    """Set a production order's status"""
    serializer = ProductionOrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = services.change_order_status(pk, serializer.validated_data['status'], user=request.user)
    return Response(ProductionOrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def production_order_issue(request, pk):
    """Issue materials to a production order"""
    serializer = IssueMaterialsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = services.issue_materials(pk, serializer.validated_data['items'], user=request.user)
    return Response(ProductionOrderDetailSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def production_order_output(request, pk):
    """Receive output from a production order"""
    serializer = ReceiveOutputSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = services.receive_output(pk, serializer.validated_data['items'], user=request.user)
    return Response(ProductionOrderDetailSerializer(order).data)
