from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, paginated_response_data
from .models import Customer
from .serializers import CustomerSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List all customers or create a new customer"""
    if request.method == 'GET':
        search = request.query_params.get('search', None)
        queryset = Customer.objects.all().order_by('-created_at', '-id')
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(phone__icontains=search))
        return Response(paginated_response_data(request, queryset, CustomerSerializer))
    else:
        serializer = CustomerSerializer(data=request.data)
        if serializer.is_valid():
            customer = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Customer',
                object_id=customer.id,
                object_name=customer.name,
                changes={'name': customer.name, 'phone': customer.phone},
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or soft-delete a customer"""
    customer = get_object_or_404(Customer, pk=pk)

    if request.method == 'GET':
        serializer = CustomerSerializer(customer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        customer.soft_delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Customer',
            object_id=customer.id,
            object_name=customer.name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
