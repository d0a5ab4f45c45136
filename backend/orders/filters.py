import django_filters
from backend.core.utils import normalize_choice, parse_date_bound
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Order search: every filter is optional, statuses are case-insensitive"""
    start_date = django_filters.CharFilter(method='filter_start_date', label='Start date')
    end_date = django_filters.CharFilter(method='filter_end_date', label='End date')
    status = django_filters.CharFilter(method='filter_status', label='Status')
    payment_status = django_filters.CharFilter(method='filter_payment_status', label='Payment status')
    customer = django_filters.NumberFilter(field_name='customer_id', lookup_expr='exact')
    search = django_filters.CharFilter(field_name='order_number', lookup_expr='icontains')

    class Meta:
        model = Order
        fields = ['start_date', 'end_date', 'status', 'payment_status', 'customer', 'search']

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(order_date__gte=parse_date_bound(value, label='start_date'))

    def filter_end_date(self, queryset, name, value):
        return queryset.filter(order_date__lte=parse_date_bound(value, end_of_day=True, label='end_date'))

    def filter_status(self, queryset, name, value):
        return queryset.filter(status=normalize_choice(value, Order.STATUS_CHOICES, 'status'))

    def filter_payment_status(self, queryset, name, value):
        return queryset.filter(payment_status=normalize_choice(value, Order.PAYMENT_STATUS_CHOICES, 'payment_status'))
