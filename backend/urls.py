"""URL configuration for the SEVIS portal backend."""
from django.contrib import admin
from django.urls import include, path

from .health import health_view

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_view, name='health'),
    path('api/applications/', include('apps.applications.urls')),
    path('api/admin/', include('apps.decisions.urls')),
]
