"""
Tenants app URL configuration.

URL prefix (registered in ``newsroom/urls.py``)::

    path('api/', include('tenants.urls'))

Endpoint summary
----------------
GET    /api/tenants/{tenant_id}/settings/   — Read the settings document.
PUT    /api/tenants/{tenant_id}/settings/   — Replace it.
PATCH  /api/tenants/{tenant_id}/settings/   — Shallow-merge top-level keys.
"""

from django.urls import path

from . import views

app_name = "tenants"

urlpatterns = [
    path(
        "tenants/<int:tenant_id>/settings/",
        views.TenantSettingsView.as_view(),
        name="tenant-settings",
    ),
]
