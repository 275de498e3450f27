"""
Reporters app serializers.

Request serializers only shape and type-check input; every business
rule (scope, designation, quota) lives in ``reporters.services``.
"""

from __future__ import annotations

from rest_framework import serializers

from core.constants import MAX_MANUAL_LOGIN_DAYS

from .models import KycStatus, Reporter, ReporterDesignation, ReporterLevel


# ────────────────────────────────────────────────────────────────────
# Designations
# ────────────────────────────────────────────────────────────────────

class ReporterDesignationSerializer(serializers.ModelSerializer):
    tenant_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = ReporterDesignation
        fields = ["id", "tenant_id", "code", "name", "level"]
        read_only_fields = fields


class DesignationFilterSerializer(serializers.Serializer):
    tenant = serializers.IntegerField(required=False)
    level = serializers.ChoiceField(choices=ReporterLevel.choices, required=False)


# ────────────────────────────────────────────────────────────────────
# Creation
# ────────────────────────────────────────────────────────────────────

class ReporterCreateSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/tenants/{tenant_id}/reporters/``.

    Exactly one of the location ids is used: the one implied by
    ``level``.  Presence and existence are checked by the service.
    """

    designation_id = serializers.IntegerField()
    level = serializers.ChoiceField(choices=ReporterLevel.choices)
    full_name = serializers.CharField(max_length=255)
    mobile_number = serializers.CharField(max_length=20)

    state_id = serializers.IntegerField(required=False, allow_null=True)
    district_id = serializers.IntegerField(required=False, allow_null=True)
    mandal_id = serializers.IntegerField(required=False, allow_null=True)
    assembly_constituency_id = serializers.IntegerField(required=False, allow_null=True)

    subscription_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    monthly_subscription_amount = serializers.IntegerField(
        required=False, allow_null=True, min_value=0, default=None,
    )
    id_card_charge = serializers.IntegerField(
        required=False, allow_null=True, min_value=0, default=None,
    )
    manual_login_enabled = serializers.BooleanField(required=False, default=False)
    manual_login_days = serializers.IntegerField(
        required=False, allow_null=True, min_value=1, max_value=MAX_MANUAL_LOGIN_DAYS,
    )


# ────────────────────────────────────────────────────────────────────
# Representation
# ────────────────────────────────────────────────────────────────────

class _NamedRefSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)


class ReporterSerializer(serializers.ModelSerializer):
    """Reporter with designation, location names and contact fields."""

    tenant_id = serializers.IntegerField(read_only=True)
    designation = ReporterDesignationSerializer(read_only=True)
    state = _NamedRefSerializer(read_only=True, allow_null=True)
    district = _NamedRefSerializer(read_only=True, allow_null=True)
    mandal = _NamedRefSerializer(read_only=True, allow_null=True)
    assembly_constituency = _NamedRefSerializer(read_only=True, allow_null=True)
    user_id = serializers.IntegerField(read_only=True)
    full_name = serializers.SerializerMethodField()
    mobile_number = serializers.CharField(source="user.mobile_number", read_only=True)

    class Meta:
        model = Reporter
        fields = [
            "id",
            "tenant_id",
            "user_id",
            "full_name",
            "mobile_number",
            "designation",
            "level",
            "state",
            "district",
            "mandal",
            "assembly_constituency",
            "subscription_active",
            "monthly_subscription_amount",
            "id_card_charge",
            "subscription_activation_date",
            "manual_login_enabled",
            "manual_login_days",
            "manual_login_expires_at",
            "kyc_status",
            "profile_photo_url",
            "auto_publish",
            "active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_full_name(self, obj: Reporter) -> str:
        profile = getattr(obj.user, "profile", None)
        return profile.full_name if profile else ""


class ReporterDetailSerializer(ReporterSerializer):
    """Adds the KYC document and verification record."""

    class Meta(ReporterSerializer.Meta):
        fields = [*ReporterSerializer.Meta.fields, "kyc_data"]
        read_only_fields = fields


class ReporterFilterSerializer(serializers.Serializer):
    level = serializers.ChoiceField(choices=ReporterLevel.choices, required=False)
    state = serializers.IntegerField(required=False)
    district = serializers.IntegerField(required=False)
    mandal = serializers.IntegerField(required=False)
    assembly_constituency = serializers.IntegerField(required=False)
    active = serializers.BooleanField(required=False, allow_null=True, default=None)


# ────────────────────────────────────────────────────────────────────
# Management requests
# ────────────────────────────────────────────────────────────────────

class SubscriptionUpdateSerializer(serializers.Serializer):
    subscription_active = serializers.BooleanField()
    monthly_subscription_amount = serializers.IntegerField(required=False, min_value=0)
    subscription_activation_date = serializers.DateTimeField(required=False, allow_null=True)


class AutoPublishSerializer(serializers.Serializer):
    auto_publish = serializers.BooleanField()


class ProfilePhotoSerializer(serializers.Serializer):
    profile_photo_url = serializers.URLField(max_length=500)


class KycSubmitSerializer(serializers.Serializer):
    aadhar_number_masked = serializers.CharField(max_length=32)
    pan_number_masked = serializers.CharField(max_length=32)
    work_proof_url = serializers.URLField(max_length=500, required=False)


class KycVerifySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            (KycStatus.APPROVED.value, KycStatus.APPROVED.label),
            (KycStatus.REJECTED.value, KycStatus.REJECTED.label),
        ],
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    verified_aadhar = serializers.BooleanField(required=False)
    verified_pan = serializers.BooleanField(required=False)
    verified_work_proof = serializers.BooleanField(required=False)

    def checks(self) -> dict[str, bool]:
        names = ("verified_aadhar", "verified_pan", "verified_work_proof")
        return {n: self.validated_data[n] for n in names if n in self.validated_data}
