"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Role

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects RBAC claims (``role``, ``hierarchy_level``,
       ``permissions_list``) into the JWT access token payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(User.USERNAME_FIELD, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username, Mobile Number, or Email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        """
        Add custom RBAC claims to the JWT payload so the frontend
        can decode role info without a separate API call.
        """
        token = super().get_token(user)

        token["role"] = user.role.name if user.role else None
        token["hierarchy_level"] = user.hierarchy_level
        token["permissions_list"] = user.permissions_list

        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is exposed as ``self.user``.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user

        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class RoleListSerializer(serializers.ModelSerializer):
    """Lightweight role representation (no permissions detail)."""

    class Meta:
        model = Role
        fields = ["id", "name", "description", "hierarchy_level"]
        read_only_fields = ["id"]


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used in login and ``me``).  Includes the
    nested role object, the profile's display fields and a flat
    permissions list consumed by the frontend to conditionally render
    UI components, e.g.::

        ['reporters.view_reporter', 'reporters.can_create_child_reporter', ...]
    """

    role_detail = RoleListSerializer(source="role", read_only=True)
    full_name = serializers.SerializerMethodField()
    profile_photo_url = serializers.SerializerMethodField()
    permissions = serializers.ListField(
        child=serializers.CharField(),
        source="permissions_list",
        read_only=True,
        help_text="Flat list of 'app_label.codename' permission strings.",
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "mobile_number",
            "email",
            "preferred_language",
            "full_name",
            "profile_photo_url",
            "is_active",
            "date_joined",
            "role",
            "role_detail",
            "permissions",
        ]
        read_only_fields = fields

    @staticmethod
    def _profile(obj):
        return getattr(obj, "profile", None)

    def get_full_name(self, obj) -> str:
        profile = self._profile(obj)
        return profile.full_name if profile else ""

    def get_profile_photo_url(self, obj) -> str:
        profile = self._profile(obj)
        return profile.profile_photo_url if profile else ""


class MeUpdateSerializer(serializers.Serializer):
    """
    Allows the authenticated user to update limited profile fields.
    Role, mobile number and activation state cannot be self-modified.
    """

    email = serializers.EmailField(required=False, allow_blank=True)
    preferred_language = serializers.CharField(required=False, max_length=8)
    full_name = serializers.CharField(required=False, max_length=255)
    profile_photo_url = serializers.URLField(required=False, allow_blank=True, max_length=500)

    def validate_preferred_language(self, value: str) -> str:
        value = value.strip().lower()
        if not value.isalpha():
            raise serializers.ValidationError("Language must be an ISO 639-1 code.")
        return value
