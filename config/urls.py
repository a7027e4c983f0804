"""URL configuration for Slotbook.

Routes the Django admin, the versioned REST API of each domain app and the
OpenAPI schema.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/slots/', include('apps.slots.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/schema/', SpectacularAPIView.as_view(), name='schema'),
]
