"""
Locations app URL configuration.

URL prefix (registered in ``newsroom/urls.py``)::

    path('api/locations/', include('locations.urls'))

Endpoint summary
----------------
GET  /api/locations/states/
GET  /api/locations/districts/?state=<id>
GET  /api/locations/mandals/?district=<id>
GET  /api/locations/assembly-constituencies/?district=<id>
"""

from django.urls import path

from . import views

app_name = "locations"

urlpatterns = [
    path("states/", views.StateListView.as_view(), name="state-list"),
    path("districts/", views.DistrictListView.as_view(), name="district-list"),
    path("mandals/", views.MandalListView.as_view(), name="mandal-list"),
    path(
        "assembly-constituencies/",
        views.AssemblyConstituencyListView.as_view(),
        name="assembly-constituency-list",
    ),
]
