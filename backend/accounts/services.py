"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service function / method, and
return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``IdentityService``       — lookup-or-create of users keyed by mobile
                              number, role correction, profile upsert.
- ``AuthenticationService`` — multi-field login + JWT issuance.
- ``CurrentUserService``    — "Me" endpoint helpers.

``IdentityService`` is the identity store used by reporter provisioning;
its methods never open their own transaction so that callers can run
them inside a larger one.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import authenticate as django_authenticate
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.tokens import RefreshToken

from core.constants import INITIAL_MPIN_LENGTH, MAX_MOBILE_DIGITS, MIN_MOBILE_DIGITS
from core.domain.exceptions import ValidationError

from .models import Role, UserProfile

logger = logging.getLogger(__name__)

User = get_user_model()


def normalize_mobile(raw: Any) -> str:
    """
    Return the canonical form of a mobile number.

    Surrounding whitespace is stripped; country prefixes are left as
    entered.  The result must consist of digits only and hold at least
    ``MIN_MOBILE_DIGITS`` and at most ``MAX_MOBILE_DIGITS`` of them.

    Raises
    ------
    core.domain.exceptions.ValidationError
        If the value is empty, contains non-digits, or has the wrong length.
    """
    mobile = str(raw or "").strip()
    if not mobile:
        raise ValidationError("mobile_number is required", field="mobile_number")
    if not mobile.isdigit() or len(mobile) < MIN_MOBILE_DIGITS:
        raise ValidationError(
            f"mobile_number must contain at least {MIN_MOBILE_DIGITS} digits",
            field="mobile_number",
        )
    if len(mobile) > MAX_MOBILE_DIGITS:
        raise ValidationError(
            f"mobile_number must contain at most {MAX_MOBILE_DIGITS} digits",
            field="mobile_number",
        )
    return mobile


def _newsroom_setting(key: str, default: Any) -> Any:
    return getattr(settings, "NEWSROOM", {}).get(key, default)


# ═══════════════════════════════════════════════════════════════════
#  Identity Service
# ═══════════════════════════════════════════════════════════════════


class IdentityService:
    """
    Identity rows created or reused when a reporter is provisioned.

    The mobile number is the stable external key; the user's primary key
    is never exposed to callers as a correlation key.
    """

    @staticmethod
    def get_reporter_role() -> Role:
        """
        Return the role assigned to provisioned reporters, creating it
        with a low hierarchy level if ``setup_rbac`` has not run yet.
        """
        name = _newsroom_setting("REPORTER_ROLE_NAME", "Reporter")
        try:
            return Role.objects.get(name__iexact=name)
        except Role.DoesNotExist:
            return Role.objects.create(
                name=name,
                hierarchy_level=10,
                description="Field reporter attached to a tenant.",
            )

    @staticmethod
    def find_user_by_mobile(mobile: str) -> User | None:
        """Return the user owning ``mobile`` (already normalised), or ``None``."""
        return (
            User.objects.select_related("role")
            .filter(mobile_number=mobile)
            .first()
        )

    @staticmethod
    def create_user(
        mobile: str,
        *,
        role: Role | None,
        language: str | None = None,
    ) -> User:
        """
        Create a user keyed by ``mobile``.

        Implementation Contract
        -----------------------
        1. ``username`` mirrors the mobile number.
        2. The initial password (MPIN) is the last
           ``INITIAL_MPIN_LENGTH`` digits of the mobile number, stored
           hashed by ``create_user``.
        3. ``preferred_language`` defaults to
           ``NEWSROOM["DEFAULT_USER_LANGUAGE"]``.
        """
        user = User.objects.create_user(
            username=mobile,
            password=mobile[-INITIAL_MPIN_LENGTH:],
            mobile_number=mobile,
            preferred_language=language or _newsroom_setting("DEFAULT_USER_LANGUAGE", "te"),
            role=role,
        )
        logger.info("Created user %s with role %s", user.pk, role)
        return user

    @staticmethod
    def update_user_role(user: User, role: Role) -> User:
        """Assign ``role`` to ``user`` unless it already holds it."""
        if user.role_id != role.pk:
            logger.info(
                "Correcting role of user %s from %s to %s",
                user.pk, user.role_id, role.pk,
            )
            user.role = role
            user.save(update_fields=["role"])
        return user

    @staticmethod
    def upsert_profile(user: User, full_name: str) -> UserProfile:
        """Create or update the profile of ``user`` with ``full_name``."""
        profile, _created = UserProfile.objects.update_or_create(
            user=user,
            defaults={"full_name": full_name},
        )
        return profile

    @staticmethod
    def upsert_user(mobile: str, *, role: Role, full_name: str) -> User:
        """
        Lookup-or-create the user for ``mobile``, correct its role and
        upsert its profile.  Calling it twice with the same mobile
        leaves exactly one user, carrying the latest ``full_name``.
        """
        user = IdentityService.find_user_by_mobile(mobile)
        if user is None:
            user = IdentityService.create_user(mobile, role=role)
        else:
            IdentityService.update_user_role(user, role)
        IdentityService.upsert_profile(user, full_name)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """
    Handles multi-field login and JWT token generation.
    Supports identification via username, mobile number or email.
    """

    @staticmethod
    def authenticate(identifier: str, password: str) -> User | None:
        """
        Validate credentials and return the user if successful.

        Returns ``None`` when the credentials are invalid or the user
        is inactive; resolution itself lives in
        ``accounts.backends.MultiFieldAuthBackend``.
        """
        return django_authenticate(identifier=identifier, password=password)

    @staticmethod
    def generate_tokens(user: User) -> dict[str, str]:
        """
        Issue a JWT access/refresh token pair for the given user.

        Returns
        -------
        dict
            ``{"access": "<token>", "refresh": "<token>"}``.
        """
        refresh = RefreshToken.for_user(user)
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers behind ``GET/PATCH /api/accounts/me/``."""

    @staticmethod
    def get_profile(user: User) -> User:
        """Re-fetch the user with role, permissions and profile prefetched."""
        return (
            User.objects.select_related("role", "profile")
            .prefetch_related("role__permissions__content_type")
            .get(pk=user.pk)
        )

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Update the authenticated user's own display fields.

        ``preferred_language`` and ``email`` live on ``User``;
        ``full_name`` and ``profile_photo_url`` live on ``UserProfile``.
        The user may NOT change their own role, mobile number or
        activation state via this endpoint.
        """
        user_fields = {
            key: validated_data[key]
            for key in ("preferred_language", "email")
            if key in validated_data
        }
        profile_fields = {
            key: validated_data[key]
            for key in ("full_name", "profile_photo_url")
            if key in validated_data
        }

        for field, value in user_fields.items():
            setattr(user, field, value)
        if user_fields:
            user.save(update_fields=list(user_fields))
        if profile_fields:
            UserProfile.objects.update_or_create(user=user, defaults=profile_fields)

        return CurrentUserService.get_profile(user)
