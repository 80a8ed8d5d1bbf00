"""
URL configuration for the hospital management backend.

The API lives at the root (see ``clinic.routers``).  The Django admin is
mounted at ``/django-admin/`` so it does not collide with the API's own
``/admin/...`` routes.  OpenAPI documentation is served at ``/swagger/``
and ``/redoc/``; Prometheus metrics at ``/metrics``.
"""
from django.contrib import admin
from django.urls import include, path

from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

api_info = openapi.Info(
    title="Hospital Management API",
    default_version='v1',
    description="Appointments, consultations, prescriptions, wards, pharmacy and emergency triage.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('django-admin/', admin.site.urls),
    path('', include('django_prometheus.urls')),
    path('', include('clinic.routers')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
