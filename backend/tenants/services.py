"""
Tenants Service Layer.

Architecture
------------
- ``TenantService``          — tenant lookup and tenant-membership guard.
- ``TenantSettingsService``  — the tenant settings store: raw document
                               read / replace / merge, plus the typed
                               reporter limits and pricing views used
                               by reporter provisioning.
"""

from __future__ import annotations

import logging
from typing import Any

from django.apps import apps
from django.db import transaction

from core.domain.access import require_permission
from core.domain.exceptions import AuthorizationError, NotFound, ValidationError
from core.permissions_constants import TenantsPerms

from .config import (
    LIMITS_KEY,
    PRICING_KEY,
    ConfigurationError,
    ReporterLimits,
    ReporterPricing,
    ResolvedPricing,
    parse_reporter_limits,
    parse_reporter_pricing,
)
from .models import Tenant, TenantSettings

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Tenant Service
# ═══════════════════════════════════════════════════════════════════


class TenantService:

    @staticmethod
    def get_tenant(tenant_id: Any) -> Tenant:
        """Return the tenant or raise ``NotFound``."""
        try:
            return Tenant.objects.get(pk=tenant_id)
        except (Tenant.DoesNotExist, ValueError, TypeError):
            raise NotFound("Tenant not found")

    @staticmethod
    def is_member(user, tenant_id: Any) -> bool:
        """
        A user belongs to a tenant when they hold an active reporter
        row in it; tenant admins and editors are onboarded that way too.
        """
        Reporter = apps.get_model("reporters", "Reporter")
        return Reporter.objects.filter(
            user=user, tenant_id=tenant_id, active=True,
        ).exists()

    @staticmethod
    def ensure_member(user, tenant_id: Any) -> None:
        if user.has_perm(f"tenants.{TenantsPerms.CAN_MANAGE_ANY_TENANT}"):
            return
        if not TenantService.is_member(user, tenant_id):
            raise AuthorizationError("Tenant scope mismatch")


# ═══════════════════════════════════════════════════════════════════
#  Tenant Settings Service
# ═══════════════════════════════════════════════════════════════════


class TenantSettingsService:
    """
    Tenant settings store.

    Reads never fail because of a badly written document: malformed
    limit rules are skipped with a warning and a malformed pricing
    section falls back to "no subscription, no charges".  Writes go
    through ``validate_document`` and reject malformed sections.
    """

    # ── Raw document ────────────────────────────────────────────────

    @staticmethod
    def get_data(tenant_id: Any) -> dict[str, Any]:
        data = (
            TenantSettings.objects
            .filter(tenant_id=tenant_id)
            .values_list("data", flat=True)
            .first()
        )
        return data if isinstance(data, dict) else {}

    @staticmethod
    def validate_document(data: dict[str, Any]) -> None:
        """
        Validate the reporter sections of a settings document.

        Raises
        ------
        core.domain.exceptions.ValidationError
            Naming the offending top-level key.
        """
        parsers = ((LIMITS_KEY, parse_reporter_limits), (PRICING_KEY, parse_reporter_pricing))
        for key, parser in parsers:
            if data.get(key) is None:
                continue
            try:
                parser(data[key])
            except ConfigurationError as exc:
                raise ValidationError(f"{key}: {exc}", field=key) from exc

    @staticmethod
    def replace_settings(user, tenant_id: Any, data: dict[str, Any]) -> TenantSettings:
        """``PUT`` semantics: the stored document becomes ``data``."""
        return TenantSettingsService._write(user, tenant_id, data, merge=False)

    @staticmethod
    def merge_settings(user, tenant_id: Any, data: dict[str, Any]) -> TenantSettings:
        """``PATCH`` semantics: top-level keys of ``data`` overwrite stored ones."""
        return TenantSettingsService._write(user, tenant_id, data, merge=True)

    @staticmethod
    def get_settings(user, tenant_id: Any) -> TenantSettings:
        tenant = TenantService.get_tenant(tenant_id)
        TenantSettingsService.ensure_can_manage(user, tenant.pk)
        settings_row, _ = TenantSettings.objects.get_or_create(tenant=tenant)
        return settings_row

    @staticmethod
    def ensure_can_manage(user, tenant_id: Any) -> None:
        require_permission(
            user,
            f"tenants.{TenantsPerms.CAN_MANAGE_ANY_TENANT}",
            f"tenants.{TenantsPerms.CAN_MANAGE_TENANT_SETTINGS}",
            message="You are not allowed to manage tenant settings.",
        )
        TenantService.ensure_member(user, tenant_id)

    @staticmethod
    def _write(user, tenant_id: Any, data: dict[str, Any], *, merge: bool) -> TenantSettings:
        tenant = TenantService.get_tenant(tenant_id)
        TenantSettingsService.ensure_can_manage(user, tenant.pk)

        with transaction.atomic():
            settings_row, _ = (
                TenantSettings.objects
                .select_for_update()
                .get_or_create(tenant=tenant)
            )
            current = settings_row.data if isinstance(settings_row.data, dict) else {}
            new_data = {**current, **data} if merge else dict(data)
            TenantSettingsService.validate_document(new_data)
            settings_row.data = new_data
            settings_row.save(update_fields=["data", "updated_at"])

        logger.info(
            "Tenant %s settings %s by user %s (keys: %s)",
            tenant.pk, "merged" if merge else "replaced", user.pk,
            ", ".join(sorted(data)) or "-",
        )
        return settings_row

    # ── Typed reporter views ────────────────────────────────────────

    @staticmethod
    def get_reporter_limits(tenant_id: Any) -> ReporterLimits | None:
        """
        Return the tenant's quota configuration, or ``None`` when the
        ``reporterLimits`` key is absent (callers then fall back to the
        fail-safe default of one reporter per bucket).
        """
        raw = TenantSettingsService.get_data(tenant_id).get(LIMITS_KEY)
        if raw is None:
            return None

        def _skip(path: str, error: Exception) -> None:
            logger.warning(
                "Tenant %s: ignoring malformed reporterLimits.%s: %s",
                tenant_id, path, error,
            )

        try:
            return parse_reporter_limits(raw, strict=False, on_skip=_skip)
        except ConfigurationError as exc:
            logger.warning(
                "Tenant %s: malformed reporterLimits (%s); using defaults.",
                tenant_id, exc,
            )
            return ReporterLimits()

    @staticmethod
    def get_reporter_pricing(tenant_id: Any, designation_id: Any) -> ResolvedPricing:
        """Resolve the subscription flag and charges for one designation."""
        raw = TenantSettingsService.get_data(tenant_id).get(PRICING_KEY)
        pricing = ReporterPricing()
        if raw is not None:
            try:
                pricing = parse_reporter_pricing(raw)
            except ConfigurationError as exc:
                logger.warning(
                    "Tenant %s: malformed reporterPricing (%s); using defaults.",
                    tenant_id, exc,
                )
        return pricing.resolve(designation_id)
