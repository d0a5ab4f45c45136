from django.urls import path
from .views import stock_adjustment_list_create, stock_adjustment_detail

urlpatterns = [
    # StockAdjustment endpoints
    path('stock-adjustments/', stock_adjustment_list_create, name='stock-adjustment-list-create'),
    path('stock-adjustments/<int:pk>/', stock_adjustment_detail, name='stock-adjustment-detail'),
]
