"""
Tenants app views — thin wrappers over ``tenants.services``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from .serializers import TenantSettingsSerializer, TenantSettingsWriteSerializer
from .services import TenantSettingsService


class TenantSettingsView(APIView):
    """
    **GET / PUT / PATCH /api/tenants/{tenant_id}/settings/**

    Read, replace or shallow-merge the tenant's settings document.
    ``reporterLimits`` and ``reporterPricing`` are validated before the
    document is saved.

    **Permission**: ``tenants.can_manage_tenant_settings`` plus tenant
    membership, or ``tenants.can_manage_any_tenant``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get tenant settings",
        responses={200: TenantSettingsSerializer, 403: OpenApiResponse(description="Not allowed."), 404: OpenApiResponse(description="Unknown tenant.")},
        tags=["Tenants"],
    )
    def get(self, request: Request, tenant_id: int) -> Response:
        settings_row = TenantSettingsService.get_settings(request.user, tenant_id)
        return Response(TenantSettingsSerializer(settings_row).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Replace tenant settings",
        request=TenantSettingsWriteSerializer,
        responses={200: TenantSettingsSerializer, 400: OpenApiResponse(description="Malformed reporter section.")},
        tags=["Tenants"],
    )
    def put(self, request: Request, tenant_id: int) -> Response:
        return self._write(request, tenant_id, TenantSettingsService.replace_settings)

    @extend_schema(
        summary="Merge tenant settings",
        request=TenantSettingsWriteSerializer,
        responses={200: TenantSettingsSerializer, 400: OpenApiResponse(description="Malformed reporter section.")},
        tags=["Tenants"],
    )
    def patch(self, request: Request, tenant_id: int) -> Response:
        return self._write(request, tenant_id, TenantSettingsService.merge_settings)

    @staticmethod
    def _write(request: Request, tenant_id: int, operation) -> Response:
        serializer = TenantSettingsWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        settings_row = operation(request.user, tenant_id, serializer.validated_data["data"])
        return Response(TenantSettingsSerializer(settings_row).data, status=status.HTTP_200_OK)
