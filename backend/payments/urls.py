from django.urls import path
from .views import payment_list_create, payment_detail, payment_refund, order_payments

urlpatterns = [
    # Payment endpoints
    path('payments/', payment_list_create, name='payment-list-create'),
    path('payments/<int:pk>/', payment_detail, name='payment-detail'),
    path('payments/<int:pk>/refund/', payment_refund, name='payment-refund'),
    path('payments/order/<int:order_id>/', order_payments, name='order-payments'),
]
