import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Basic search - searches across name, SKU and barcode
    search = django_filters.CharFilter(method='filter_search', label='Search')
    active = django_filters.CharFilter(method='filter_active', label='Active')

    # Stock status filters
    in_stock = django_filters.CharFilter(method='filter_in_stock', label='In Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'active', 'in_stock', 'out_of_stock']

    @staticmethod
    def _is_true(value):
        return str(value).lower() in ('true', '1', 'yes')

    def filter_search(self, queryset, name, value):
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(name__icontains=search) | Q(sku__icontains=search) | Q(barcode__iexact=search)
        )

    def filter_active(self, queryset, name, value):
        return queryset.filter(is_active=self._is_true(value))

    def filter_in_stock(self, queryset, name, value):
        if self._is_true(value):
            return queryset.filter(quantity_in_stock__gt=0)
        return queryset

    def filter_out_of_stock(self, queryset, name, value):
        if self._is_true(value):
            return queryset.filter(quantity_in_stock__lte=0)
        return queryset
