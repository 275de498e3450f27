"""
Reporters app URL configuration.

URL prefix (registered in ``newsroom/urls.py``)::

    path('api/', include('reporters.urls'))

Endpoint summary
----------------
GET     /api/tenants/{tenant_id}/reporters/                       — List reporters.
POST    /api/tenants/{tenant_id}/reporters/                       — Create a reporter.
GET     /api/tenants/{tenant_id}/reporters/{pk}/                  — Reporter detail.
PATCH   /api/tenants/{tenant_id}/reporters/{pk}/deactivate/       — Soft-disable.
PATCH   /api/tenants/{tenant_id}/reporters/{pk}/subscription/     — Subscription state.
PATCH   /api/tenants/{tenant_id}/reporters/{pk}/auto-publish/     — Toggle auto-publish.
PATCH   /api/tenants/{tenant_id}/reporters/{pk}/profile-photo/    — Set photo.
DELETE  /api/tenants/{tenant_id}/reporters/{pk}/profile-photo/    — Clear photo.
POST    /api/tenants/{tenant_id}/reporters/{pk}/kyc/              — Submit KYC.
PATCH   /api/tenants/{tenant_id}/reporters/{pk}/kyc/verify/       — Approve / reject KYC.
GET     /api/reporter-designations/                               — Designations.
"""

from django.urls import path

from . import views

app_name = "reporters"

_REPORTER = "tenants/<int:tenant_id>/reporters/<int:pk>/"

urlpatterns = [
    path(
        "tenants/<int:tenant_id>/reporters/",
        views.ReporterListCreateView.as_view(),
        name="reporter-list",
    ),
    path(_REPORTER, views.ReporterDetailView.as_view(), name="reporter-detail"),
    path(f"{_REPORTER}deactivate/", views.ReporterDeactivateView.as_view(), name="reporter-deactivate"),
    path(f"{_REPORTER}subscription/", views.ReporterSubscriptionView.as_view(), name="reporter-subscription"),
    path(f"{_REPORTER}auto-publish/", views.ReporterAutoPublishView.as_view(), name="reporter-auto-publish"),
    path(f"{_REPORTER}profile-photo/", views.ReporterProfilePhotoView.as_view(), name="reporter-profile-photo"),
    path(f"{_REPORTER}kyc/", views.ReporterKycSubmitView.as_view(), name="reporter-kyc-submit"),
    path(f"{_REPORTER}kyc/verify/", views.ReporterKycVerifyView.as_view(), name="reporter-kyc-verify"),
    path(
        "reporter-designations/",
        views.ReporterDesignationListView.as_view(),
        name="designation-list",
    ),
]
