from django.urls import path
from .views import (
    recipe_list_create, recipe_detail, recipe_duplicate, recipe_completed,
    production_order_list_create, production_order_page, production_order_detail,
    production_order_status, production_order_issue, production_order_output
)

urlpatterns = [
    # Recipe endpoints
    path('manufacturing/recipes/', recipe_list_create, name='recipe-list-create'),
    path('manufacturing/recipes/<int:pk>/', recipe_detail, name='recipe-detail'),
    path('manufacturing/recipes/<int:pk>/duplicate/', recipe_duplicate, name='recipe-duplicate'),
    path('manufacturing/recipes/<int:pk>/completed/', recipe_completed, name='recipe-completed'),

    # Production order endpoints
    path('manufacturing/orders/', production_order_list_create, name='production-order-list-create'),
    path('manufacturing/orders/page/', production_order_page, name='production-order-page'),
    path('manufacturing/orders/<int:pk>/', production_order_detail, name='production-order-detail'),
    path('manufacturing/orders/<int:pk>/status/', production_order_status, name='production-order-status'),
    path('manufacturing/orders/<int:pk>/issue/', production_order_issue, name='production-order-issue'),
    path('manufacturing/orders/<int:pk>/output/', production_order_output, name='production-order-output'),
]
