"""
Reporters app views — thin wrappers over ``reporters.services``.

Views validate the request shape, call one service method and
serialize the result.  Domain exceptions raised by the services are
mapped to HTTP responses by ``core.domain.exception_handler``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from .serializers import (
    AutoPublishSerializer,
    DesignationFilterSerializer,
    KycSubmitSerializer,
    KycVerifySerializer,
    ProfilePhotoSerializer,
    ReporterCreateSerializer,
    ReporterDesignationSerializer,
    ReporterDetailSerializer,
    ReporterFilterSerializer,
    ReporterSerializer,
    SubscriptionUpdateSerializer,
)
from .services import (
    DesignationService,
    ReporterCreationService,
    ReporterManagementService,
    ReporterQueryService,
)

_FORBIDDEN = OpenApiResponse(description="Not allowed for this user or tenant.")
_NOT_FOUND = OpenApiResponse(description="Unknown tenant or reporter.")
_BAD_TRANSITION = OpenApiResponse(description="KYC is not in a state that allows this.")


def _detail(reporter) -> Response:
    return Response(ReporterDetailSerializer(reporter).data, status=status.HTTP_200_OK)


class ReporterListCreateView(APIView):
    """
    **GET  /api/tenants/{tenant_id}/reporters/** — list, newest first.
    **POST /api/tenants/{tenant_id}/reporters/** — onboard a reporter.

    Creation runs scope, designation and quota checks and the identity
    upsert in one serializable transaction.  A full quota bucket
    answers ``409`` with ``current`` / ``maxAllowed`` in the body.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List tenant reporters",
        parameters=[
            OpenApiParameter(name="level", type=str, required=False),
            OpenApiParameter(name="state", type=int, required=False),
            OpenApiParameter(name="district", type=int, required=False),
            OpenApiParameter(name="mandal", type=int, required=False),
            OpenApiParameter(name="assembly_constituency", type=int, required=False),
            OpenApiParameter(name="active", type=bool, required=False),
        ],
        responses={200: ReporterSerializer(many=True), 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def get(self, request: Request, tenant_id: int) -> Response:
        filters = ReporterFilterSerializer(data=request.query_params.dict())
        filters.is_valid(raise_exception=True)
        qs = ReporterQueryService.list_reporters(request.user, tenant_id, filters.validated_data)
        return Response(ReporterSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Create a reporter",
        request=ReporterCreateSerializer,
        responses={
            201: ReporterSerializer,
            400: OpenApiResponse(description="Missing or invalid field."),
            403: _FORBIDDEN,
            404: _NOT_FOUND,
            409: OpenApiResponse(description="Reporter limit reached, or a concurrent request won."),
        },
        tags=["Reporters"],
    )
    def post(self, request: Request, tenant_id: int) -> Response:
        serializer = ReporterCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reporter = ReporterCreationService.create_reporter(
            request.user, tenant_id, serializer.validated_data,
        )
        return Response(ReporterSerializer(reporter).data, status=status.HTTP_201_CREATED)


class ReporterDetailView(APIView):
    """**GET /api/tenants/{tenant_id}/reporters/{pk}/**"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Retrieve a reporter",
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def get(self, request: Request, tenant_id: int, pk: int) -> Response:
        return _detail(ReporterQueryService.get_reporter(request.user, tenant_id, pk))


class ReporterDeactivateView(APIView):
    """
    **PATCH /api/tenants/{tenant_id}/reporters/{pk}/deactivate/**

    Soft-disables the reporter; rows are never deleted.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Deactivate a reporter",
        request=None,
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def patch(self, request: Request, tenant_id: int, pk: int) -> Response:
        return _detail(ReporterManagementService.deactivate(request.user, tenant_id, pk))


class ReporterSubscriptionView(APIView):
    """**PATCH /api/tenants/{tenant_id}/reporters/{pk}/subscription/**"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Update a reporter's subscription",
        request=SubscriptionUpdateSerializer,
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def patch(self, request: Request, tenant_id: int, pk: int) -> Response:
        serializer = SubscriptionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reporter = ReporterManagementService.update_subscription(
            request.user, tenant_id, pk, serializer.validated_data,
        )
        return _detail(reporter)


class ReporterAutoPublishView(APIView):
    """**PATCH /api/tenants/{tenant_id}/reporters/{pk}/auto-publish/**"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Toggle auto-publish",
        request=AutoPublishSerializer,
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def patch(self, request: Request, tenant_id: int, pk: int) -> Response:
        serializer = AutoPublishSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reporter = ReporterManagementService.set_auto_publish(
            request.user, tenant_id, pk, serializer.validated_data["auto_publish"],
        )
        return _detail(reporter)


class ReporterProfilePhotoView(APIView):
    """
    **PATCH  /api/tenants/{tenant_id}/reporters/{pk}/profile-photo/** — set.
    **DELETE /api/tenants/{tenant_id}/reporters/{pk}/profile-photo/** — clear.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Set a reporter's profile photo",
        request=ProfilePhotoSerializer,
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def patch(self, request: Request, tenant_id: int, pk: int) -> Response:
        serializer = ProfilePhotoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reporter = ReporterManagementService.set_profile_photo(
            request.user, tenant_id, pk, serializer.validated_data["profile_photo_url"],
        )
        return _detail(reporter)

    @extend_schema(
        summary="Clear a reporter's profile photo",
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND},
        tags=["Reporters"],
    )
    def delete(self, request: Request, tenant_id: int, pk: int) -> Response:
        return _detail(ReporterManagementService.set_profile_photo(request.user, tenant_id, pk, ""))


class ReporterKycSubmitView(APIView):
    """
    **POST /api/tenants/{tenant_id}/reporters/{pk}/kyc/**

    Submit masked identity documents.  Allowed from ``PENDING`` or
    ``REJECTED``; any other state answers ``409``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Submit reporter KYC",
        request=KycSubmitSerializer,
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND, 409: _BAD_TRANSITION},
        tags=["Reporters"],
    )
    def post(self, request: Request, tenant_id: int, pk: int) -> Response:
        serializer = KycSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reporter = ReporterManagementService.submit_kyc(
            request.user, tenant_id, pk, dict(serializer.validated_data),
        )
        return _detail(reporter)


class ReporterKycVerifyView(APIView):
    """**PATCH /api/tenants/{tenant_id}/reporters/{pk}/kyc/verify/**"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Approve or reject reporter KYC",
        request=KycVerifySerializer,
        responses={200: ReporterDetailSerializer, 403: _FORBIDDEN, 404: _NOT_FOUND, 409: _BAD_TRANSITION},
        tags=["Reporters"],
    )
    def patch(self, request: Request, tenant_id: int, pk: int) -> Response:
        serializer = KycVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reporter = ReporterManagementService.verify_kyc(
            request.user,
            tenant_id,
            pk,
            status=serializer.validated_data["status"],
            notes=serializer.validated_data["notes"],
            checks=serializer.checks(),
        )
        return _detail(reporter)


class ReporterDesignationListView(APIView):
    """
    **GET /api/reporter-designations/?tenant=<id>&level=<LEVEL>**

    Public listing used by onboarding forms: platform designations
    merged with the tenant's overrides by ``code``.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="List reporter designations",
        parameters=[
            OpenApiParameter(name="tenant", type=int, required=False),
            OpenApiParameter(name="level", type=str, required=False),
        ],
        responses={200: ReporterDesignationSerializer(many=True)},
        tags=["Reporters"],
    )
    def get(self, request: Request) -> Response:
        filters = DesignationFilterSerializer(data=request.query_params.dict())
        filters.is_valid(raise_exception=True)
        designations = DesignationService.list_designations(
            tenant_id=filters.validated_data.get("tenant"),
            level=filters.validated_data.get("level"),
        )
        return Response(
            ReporterDesignationSerializer(designations, many=True).data,
            status=status.HTTP_200_OK,
        )
