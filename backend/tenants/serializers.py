"""
Tenants app serializers.

The settings document is free-form JSON; only its reporter sections
are validated, by the service layer.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Tenant, TenantSettings


class TenantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = ["id", "name", "slug", "is_active"]
        read_only_fields = fields


class TenantSettingsWriteSerializer(serializers.Serializer):
    """Request body for ``PUT`` / ``PATCH`` of a tenant's settings."""

    data = serializers.DictField(
        help_text=(
            "Settings document.  PUT replaces the stored document; PATCH "
            "overwrites only the top-level keys present here."
        ),
    )


class TenantSettingsSerializer(serializers.ModelSerializer):
    tenant = TenantSerializer(read_only=True)

    class Meta:
        model = TenantSettings
        fields = ["tenant", "data", "updated_at"]
        read_only_fields = fields
