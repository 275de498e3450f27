"""
Locations app views — read-only listings of the geography tree.

Soft-deleted rows are never listed.  Results are ordered by name.
"""

from __future__ import annotations

from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from drf_spectacular.utils import OpenApiParameter, extend_schema

from .serializers import (
    AssemblyConstituencySerializer,
    DistrictSerializer,
    MandalSerializer,
    ParentFilterSerializer,
    StateSerializer,
)
from .services import LocationQueryService


class _FilteredListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def filters(self) -> dict:
        serializer = ParentFilterSerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


@extend_schema(summary="List states", tags=["Locations"])
class StateListView(_FilteredListView):
    """**GET /api/locations/states/**"""

    serializer_class = StateSerializer

    def get_queryset(self):
        return LocationQueryService.list_states()


@extend_schema(
    summary="List districts",
    parameters=[OpenApiParameter(name="state", type=int, required=False)],
    tags=["Locations"],
)
class DistrictListView(_FilteredListView):
    """**GET /api/locations/districts/?state=<id>**"""

    serializer_class = DistrictSerializer

    def get_queryset(self):
        return LocationQueryService.list_districts(state_id=self.filters().get("state"))


@extend_schema(
    summary="List mandals",
    parameters=[OpenApiParameter(name="district", type=int, required=False)],
    tags=["Locations"],
)
class MandalListView(_FilteredListView):
    """**GET /api/locations/mandals/?district=<id>**"""

    serializer_class = MandalSerializer

    def get_queryset(self):
        return LocationQueryService.list_mandals(district_id=self.filters().get("district"))


@extend_schema(
    summary="List assembly constituencies",
    parameters=[OpenApiParameter(name="district", type=int, required=False)],
    tags=["Locations"],
)
class AssemblyConstituencyListView(_FilteredListView):
    """**GET /api/locations/assembly-constituencies/?district=<id>**"""

    serializer_class = AssemblyConstituencySerializer

    def get_queryset(self):
        return LocationQueryService.list_assembly_constituencies(
            district_id=self.filters().get("district"),
        )
