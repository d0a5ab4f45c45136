import django_filters
from backend.core.utils import normalize_choice, parse_date_bound
from .models import Payment


class PaymentFilter(django_filters.FilterSet):
    """Payment search: every filter is optional; created_at range is inclusive"""
    order = django_filters.NumberFilter(field_name='order_id', lookup_expr='exact')
    status = django_filters.CharFilter(method='filter_status', label='Status')
    payment_method = django_filters.CharFilter(method='filter_payment_method', label='Payment method')
    start_date = django_filters.CharFilter(method='filter_start_date', label='Start date')
    end_date = django_filters.CharFilter(method='filter_end_date', label='End date')

    class Meta:
        model = Payment
        fields = ['order', 'status', 'payment_method', 'start_date', 'end_date']

    def filter_status(self, queryset, name, value):
        return queryset.filter(status=normalize_choice(value, Payment.STATUS_CHOICES, 'status'))

    def filter_payment_method(self, queryset, name, value):
        return queryset.filter(payment_method=normalize_choice(value, Payment.PAYMENT_METHOD_CHOICES, 'payment_method'))

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(created_at__gte=parse_date_bound(value, label='start_date'))

    def filter_end_date(self, queryset, name, value):
        return queryset.filter(created_at__lte=parse_date_bound(value, end_of_day=True, label='end_date'))
