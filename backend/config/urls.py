"""
URL configuration for backend project.

Every app exposes its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Back Office Admin Panel"
admin.site.site_title = "Back Office Admin Portal"
admin.site.index_title = "Orders, Payments and Production"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.orders.urls')),
    path('api/v1/', include('backend.payments.urls')),
    path('api/v1/', include('backend.manufacturing.urls')),
]
