"""
Reporters Service Layer.

This module is the **single source of truth** for reporter business
logic.  Views validate input through serializers, call one of the
services below and wrap the result in a DRF ``Response``.

Architecture
------------
- ``ReporterStore``                — count / insert primitives, always run
                                     inside the caller's transaction.
- ``ReporterCreationService``      — onboarding: authorization, scope,
                                     designation, quota, identity upsert
                                     and insert in one SERIALIZABLE
                                     transaction retried on conflict.
- ``ReporterQueryService``         — tenant-scoped listing and retrieval.
- ``ReporterManagementService``    — deactivation, subscription, auto
                                     publish, profile photo, KYC.
- ``ReporterSubscriptionService``  — scheduled subscription activation.
- ``DesignationService``           — designation lookup and the merged
                                     global + tenant designation list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from django.db.models import QuerySet
from django.utils import timezone

from accounts.services import IdentityService, normalize_mobile
from core.domain.access import apply_permission_scope, require_permission
from core.domain.exceptions import (
    AuthorizationError,
    NotFound,
    QuotaExceededError,
    ValidationError,
)
from core.domain.transactions import MIN_SERIALIZABLE_ATTEMPTS, atomic_transition, run_serializable
from core.permissions_constants import ReportersPerms, TenantsPerms
from locations.services import GeographyLookup
from tenants.models import Tenant
from tenants.services import TenantService, TenantSettingsService

from .models import (
    LEVEL_LOCATION_FIELDS,
    TENANT_ADMIN_DESIGNATION_CODE,
    KycStatus,
    Reporter,
    ReporterDesignation,
    ReporterLevel,
)
from .quotas import resolve_max
from .scope import CreatorScope, can_create

logger = logging.getLogger(__name__)

PERM_ANY_TENANT = f"reporters.{ReportersPerms.CAN_CREATE_REPORTER_ANY_TENANT}"
PERM_TENANT_ADMIN = f"reporters.{ReportersPerms.CAN_CREATE_TENANT_REPORTER}"
PERM_CHILD = f"reporters.{ReportersPerms.CAN_CREATE_CHILD_REPORTER}"
PERM_MANAGE = f"reporters.{ReportersPerms.CAN_MANAGE_TENANT_REPORTERS}"
PERM_VERIFY_KYC = f"reporters.{ReportersPerms.CAN_VERIFY_KYC}"
PERM_VIEW = f"reporters.{ReportersPerms.VIEW_REPORTER}"
PERM_PLATFORM = f"tenants.{TenantsPerms.CAN_MANAGE_ANY_TENANT}"

_DETAIL_RELATED = (
    "tenant", "designation", "user", "user__profile",
    "state", "district", "mandal", "assembly_constituency",
)


def _newsroom_setting(key: str, default: Any) -> Any:
    return getattr(settings, "NEWSROOM", {}).get(key, default)


def _location_of(level: str, data: dict[str, Any]) -> tuple[str, str, Any]:
    """Return ``(model_field, config_key, id)`` of the location implied by ``level``."""
    field, key = LEVEL_LOCATION_FIELDS[level]
    return field, key, data.get(f"{field}_id")


# ═══════════════════════════════════════════════════════════════════
#  Reporter Store
# ═══════════════════════════════════════════════════════════════════


class ReporterStore:
    """Row-level primitives; callers own the transaction."""

    @staticmethod
    def count_active_reporters(
        tenant_id: Any,
        designation_id: Any,
        level: str,
        location_field: str,
        location_id: Any,
    ) -> int:
        return Reporter.objects.filter(
            tenant_id=tenant_id,
            designation_id=designation_id,
            level=level,
            active=True,
            **{f"{location_field}_id": location_id},
        ).count()

    @staticmethod
    def insert_reporter(**fields: Any) -> Reporter:
        return Reporter.objects.create(**fields)


# ═══════════════════════════════════════════════════════════════════
#  Creation
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CreatorContext:
    """Who is onboarding: ``platform``, ``tenant_admin`` or ``reporter``."""

    kind: str
    reporter: Reporter | None = None


class ReporterCreationService:
    """
    Onboard a reporter into a tenant.

    Steps 1-3 (input validation, actor resolution, scope) only read;
    steps 4-7 (designation, quota, identity upsert, insert) run in one
    SERIALIZABLE transaction so that two concurrent requests for the
    same quota bucket cannot both pass the count.
    """

    REQUIRED_FIELDS = ("designation_id", "level", "full_name", "mobile_number")

    @staticmethod
    def create_reporter(actor, tenant_id: Any, data: dict[str, Any], *, geography=None) -> Reporter:
        """
        Create (or link) the identity rows and insert the reporter.

        Parameters
        ----------
        actor : User
            The authenticated user performing the request.
        tenant_id : int
            Tenant the reporter joins.
        data : dict
            ``designation_id``, ``level``, ``full_name``,
            ``mobile_number``, the ``<location>_id`` implied by
            ``level`` and optionally ``subscription_active``,
            ``monthly_subscription_amount``, ``id_card_charge``,
            ``manual_login_enabled``, ``manual_login_days``.

        Returns
        -------
        Reporter
            Re-fetched with designation, locations and the user's
            profile so ``full_name`` / ``mobile_number`` can be rendered.

        Raises
        ------
        ValidationError       missing / malformed input, bad designation.
        NotFound              unknown tenant.
        AuthorizationError    role, tenant, subscription or scope violation.
        QuotaExceededError    the quota bucket is full (nothing written).
        ConflictError         serialization conflict survived the retry.
        """
        geography = geography or GeographyLookup()

        payload = ReporterCreationService._validate_input(data)
        tenant = TenantService.get_tenant(tenant_id)

        creator = ReporterCreationService._resolve_creator(actor, tenant)
        ReporterCreationService._authorize(creator, payload, geography)
        ReporterCreationService._validate_location(payload, geography)

        reporter = run_serializable(
            ReporterCreationService._create_in_transaction,
            tenant,
            payload,
            max_attempts=_newsroom_setting("REPORTER_CREATE_MAX_ATTEMPTS", MIN_SERIALIZABLE_ATTEMPTS),
            wait_max=_newsroom_setting("REPORTER_CREATE_RETRY_WAIT_MAX", 0.2),
        )

        logger.info(
            "Reporter %s created in tenant %s (level=%s, designation=%s) by %s user %s",
            reporter.pk, tenant.pk, reporter.level, reporter.designation_id,
            creator.kind, actor.pk,
        )
        return Reporter.objects.select_related(*_DETAIL_RELATED).get(pk=reporter.pk)

    # ── Step 1: input ───────────────────────────────────────────────

    @staticmethod
    def _validate_input(data: dict[str, Any]) -> dict[str, Any]:
        for name in ReporterCreationService.REQUIRED_FIELDS:
            value = data.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"{name} is required", field=name)

        level = str(data["level"])
        if level not in ReporterLevel.values:
            raise ValidationError("Invalid level", field="level")

        field, _key, location_id = _location_of(level, data)
        if location_id in (None, ""):
            raise ValidationError(
                f"{field}_id is required for {level} level",
                field=f"{field}_id",
            )

        payload = dict(data)
        payload["level"] = level
        payload["full_name"] = str(data["full_name"]).strip()
        payload["mobile_number"] = normalize_mobile(data["mobile_number"])
        return payload

    # ── Steps 2-3: actor, scope ─────────────────────────────────────

    @staticmethod
    def _resolve_creator(actor, tenant: Tenant) -> CreatorContext:
        if actor.has_perm(PERM_ANY_TENANT):
            return CreatorContext(kind="platform")

        if actor.has_perm(PERM_TENANT_ADMIN):
            kind = "tenant_admin"
        elif actor.has_perm(PERM_CHILD):
            kind = "reporter"
        else:
            raise AuthorizationError("You are not allowed to create reporters.")

        own_rows = Reporter.objects.filter(user=actor)
        row = own_rows.filter(tenant=tenant).order_by("-active", "-created_at").first()
        if row is None:
            if own_rows.exists():
                raise AuthorizationError("Tenant scope mismatch")
            raise AuthorizationError("Reporter profile not linked to tenant")
        if not row.active:
            raise AuthorizationError("Reporter account inactive")

        return CreatorContext(kind=kind, reporter=row)

    @staticmethod
    def _authorize(creator: CreatorContext, payload: dict[str, Any], geography) -> None:
        if creator.kind != "reporter":
            return

        if not creator.reporter.subscription_active:
            raise AuthorizationError("Subscription must be active to create reporters")
        if payload.get("subscription_active") is not True:
            raise AuthorizationError(
                "subscription_active=true required when a reporter creates another reporter"
            )

        level = payload["level"]
        _field, _key, location_id = _location_of(level, payload)
        decision = can_create(CreatorScope.of(creator.reporter), level, location_id, geography)
        if not decision.allowed:
            raise AuthorizationError(decision.reason)

    @staticmethod
    def _validate_location(payload: dict[str, Any], geography) -> None:
        level = payload["level"]
        field, _key, location_id = _location_of(level, payload)
        resolvers = {
            ReporterLevel.STATE.value: geography.state_exists,
            ReporterLevel.DISTRICT.value: geography.get_district,
            ReporterLevel.MANDAL.value: geography.get_mandal,
            ReporterLevel.ASSEMBLY.value: geography.get_assembly_constituency,
        }
        if not resolvers[level](location_id):
            raise ValidationError(f"Invalid {field}_id", field=f"{field}_id")

    # ── Steps 4-7: one serializable transaction ─────────────────────

    @staticmethod
    def _create_in_transaction(tenant: Tenant, payload: dict[str, Any]) -> Reporter:
        level = payload["level"]
        field, config_key, location_id = _location_of(level, payload)

        designation = DesignationService.get_for_onboarding(
            payload["designation_id"], level=level, tenant_id=tenant.pk,
        )

        limits = TenantSettingsService.get_reporter_limits(tenant.pk)
        max_allowed = resolve_max(limits, designation.pk, level, config_key, location_id)
        current = ReporterStore.count_active_reporters(
            tenant.pk, designation.pk, level, field, location_id,
        )
        if current >= max_allowed:
            raise QuotaExceededError(
                current=current,
                max_allowed=max_allowed,
                designation_id=str(designation.pk),
                level=level,
                location_field=config_key,
                location_id=str(location_id),
            )

        role = IdentityService.get_reporter_role()
        user = IdentityService.upsert_user(
            payload["mobile_number"], role=role, full_name=payload["full_name"],
        )

        fields = ReporterCreationService._pricing_fields(tenant, designation, payload)
        fields.update(ReporterCreationService._manual_login_fields(payload))
        fields[f"{field}_id"] = location_id

        return ReporterStore.insert_reporter(
            tenant=tenant,
            user=user,
            designation=designation,
            level=level,
            **fields,
        )

    @staticmethod
    def _pricing_fields(tenant: Tenant, designation, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Snapshot tenant pricing onto the row.  Explicit request values
        win; the monthly amount is always 0 for an inactive subscription.
        """
        pricing = TenantSettingsService.get_reporter_pricing(tenant.pk, designation.pk)

        subscription_active = payload.get("subscription_active")
        if subscription_active is None:
            subscription_active = pricing.subscription_enabled

        monthly = payload.get("monthly_subscription_amount")
        if monthly is None:
            monthly = pricing.monthly_amount
        if not subscription_active:
            monthly = 0

        id_card_charge = payload.get("id_card_charge")
        if id_card_charge is None:
            id_card_charge = pricing.id_card_charge

        return {
            "subscription_active": subscription_active,
            "monthly_subscription_amount": monthly,
            "id_card_charge": id_card_charge,
        }

    @staticmethod
    def _manual_login_fields(payload: dict[str, Any]) -> dict[str, Any]:
        enabled = bool(payload.get("manual_login_enabled"))
        days = payload.get("manual_login_days")
        expires_at = None
        if enabled and days:
            expires_at = timezone.now() + timedelta(days=days)
        return {
            "manual_login_enabled": enabled,
            "manual_login_days": days if enabled else None,
            "manual_login_expires_at": expires_at,
        }


# ═══════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════


class ReporterQueryService:

    LIST_FILTERS = ("level", "state", "district", "mandal", "assembly_constituency", "active")

    @staticmethod
    def ensure_can_view(actor, tenant_id: Any) -> None:
        require_permission(actor, PERM_PLATFORM, PERM_VIEW)
        TenantService.ensure_member(actor, tenant_id)

    @staticmethod
    def base_queryset(actor) -> QuerySet[Reporter]:
        """Reporters the actor may see across tenants."""
        return apply_permission_scope(
            Reporter.objects.select_related(*_DETAIL_RELATED),
            actor,
            scope_rules=[
                (PERM_PLATFORM, lambda qs, u: qs),
                (PERM_VIEW, lambda qs, u: qs.filter(
                    tenant__reporters__user=u,
                    tenant__reporters__active=True,
                ).distinct()),
            ],
        )

    @staticmethod
    def list_reporters(actor, tenant_id: Any, filters: dict[str, Any]) -> QuerySet[Reporter]:
        """Newest first; filters are exact matches on the named fields."""
        TenantService.get_tenant(tenant_id)
        ReporterQueryService.ensure_can_view(actor, tenant_id)

        qs = ReporterQueryService.base_queryset(actor).filter(tenant_id=tenant_id)
        for name in ReporterQueryService.LIST_FILTERS:
            value = filters.get(name)
            if value is None:
                continue
            lookup = name if name in ("level", "active") else f"{name}_id"
            qs = qs.filter(**{lookup: value})
        return qs.order_by("-created_at", "-pk")

    @staticmethod
    def get_reporter(actor, tenant_id: Any, reporter_id: Any) -> Reporter:
        TenantService.get_tenant(tenant_id)
        ReporterQueryService.ensure_can_view(actor, tenant_id)
        return _get_in_tenant(tenant_id, reporter_id)


def _get_in_tenant(tenant_id: Any, reporter_id: Any) -> Reporter:
    try:
        return Reporter.objects.select_related(*_DETAIL_RELATED).get(
            pk=reporter_id, tenant_id=tenant_id,
        )
    except (Reporter.DoesNotExist, ValueError, TypeError):
        raise NotFound("Reporter not found")


# ═══════════════════════════════════════════════════════════════════
#  Management
# ═══════════════════════════════════════════════════════════════════


class ReporterManagementService:
    """
    Editorial operations on existing reporters.  All of them require
    ``tenants.can_manage_any_tenant`` or
    ``reporters.can_manage_tenant_reporters`` plus tenant membership.
    """

    @staticmethod
    def _managed(actor, tenant_id: Any, reporter_id: Any) -> Reporter:
        TenantService.get_tenant(tenant_id)
        require_permission(
            actor, PERM_PLATFORM, PERM_MANAGE,
            message="You are not allowed to manage reporters.",
        )
        TenantService.ensure_member(actor, tenant_id)
        return _get_in_tenant(tenant_id, reporter_id)

    @staticmethod
    def _save(reporter: Reporter, fields: list[str]) -> Reporter:
        reporter.save(update_fields=[*fields, "updated_at"])
        return reporter

    @staticmethod
    def deactivate(actor, tenant_id: Any, reporter_id: Any) -> Reporter:
        """Soft-disable; the row stays and stops counting towards quotas."""
        reporter = ReporterManagementService._managed(actor, tenant_id, reporter_id)
        if reporter.active:
            reporter.active = False
            ReporterManagementService._save(reporter, ["active"])
            logger.info("Reporter %s deactivated by user %s", reporter.pk, actor.pk)
        return reporter

    @staticmethod
    def update_subscription(actor, tenant_id: Any, reporter_id: Any, data: dict[str, Any]) -> Reporter:
        """
        Update ``subscription_active`` and, optionally, the monthly amount
        and a scheduled activation date.

        An inactive subscription without a pending activation date always
        carries a monthly amount of 0.
        """
        reporter = ReporterManagementService._managed(actor, tenant_id, reporter_id)

        changed = ["subscription_active"]
        reporter.subscription_active = data["subscription_active"]
        if "monthly_subscription_amount" in data:
            reporter.monthly_subscription_amount = data["monthly_subscription_amount"]
            changed.append("monthly_subscription_amount")
        if "subscription_activation_date" in data:
            reporter.subscription_activation_date = data["subscription_activation_date"]
            changed.append("subscription_activation_date")

        if not reporter.subscription_active and reporter.subscription_activation_date is None:
            reporter.monthly_subscription_amount = 0
            if "monthly_subscription_amount" not in changed:
                changed.append("monthly_subscription_amount")

        ReporterManagementService._save(reporter, changed)
        logger.info(
            "Reporter %s subscription set to %s by user %s",
            reporter.pk, reporter.subscription_active, actor.pk,
        )
        return reporter

    @staticmethod
    def set_auto_publish(actor, tenant_id: Any, reporter_id: Any, enabled: bool) -> Reporter:
        reporter = ReporterManagementService._managed(actor, tenant_id, reporter_id)
        reporter.auto_publish = enabled
        return ReporterManagementService._save(reporter, ["auto_publish"])

    @staticmethod
    def set_profile_photo(actor, tenant_id: Any, reporter_id: Any, url: str) -> Reporter:
        """Store ``url`` on the reporter; an empty string clears it."""
        reporter = ReporterManagementService._managed(actor, tenant_id, reporter_id)
        reporter.profile_photo_url = url
        return ReporterManagementService._save(reporter, ["profile_photo_url"])

    # ── KYC ─────────────────────────────────────────────────────────

    @staticmethod
    def submit_kyc(actor, tenant_id: Any, reporter_id: Any, documents: dict[str, Any]) -> Reporter:
        """
        ``PENDING``/``REJECTED`` → ``SUBMITTED``.  The reporter may submit
        their own documents; managers may submit on their behalf.
        """
        TenantService.get_tenant(tenant_id)
        reporter = _get_in_tenant(tenant_id, reporter_id)
        if reporter.user_id != actor.pk:
            reporter = ReporterManagementService._managed(actor, tenant_id, reporter_id)

        current = reporter.kyc_data if isinstance(reporter.kyc_data, dict) else {}
        reporter.kyc_data = {
            **current,
            "documents": documents,
            "submittedAt": timezone.now().isoformat(),
        }
        atomic_transition(
            instance=reporter,
            status_field="kyc_status",
            target_status=KycStatus.SUBMITTED.value,
            allowed_sources={KycStatus.PENDING.value, KycStatus.REJECTED.value},
            save_fields=["kyc_data"],
        )
        logger.info("Reporter %s KYC submitted by user %s", reporter.pk, actor.pk)
        return reporter

    @staticmethod
    def verify_kyc(
        actor,
        tenant_id: Any,
        reporter_id: Any,
        *,
        status: str,
        notes: str = "",
        checks: dict[str, bool] | None = None,
    ) -> Reporter:
        """``SUBMITTED`` → ``APPROVED`` | ``REJECTED``."""
        if status not in (KycStatus.APPROVED, KycStatus.REJECTED):
            raise ValidationError("status must be APPROVED or REJECTED", field="status")

        reporter = ReporterManagementService._managed(actor, tenant_id, reporter_id)
        require_permission(
            actor, PERM_PLATFORM, PERM_VERIFY_KYC,
            message="You are not allowed to verify KYC.",
        )

        current = reporter.kyc_data if isinstance(reporter.kyc_data, dict) else {}
        reporter.kyc_data = {
            **current,
            "verification": {
                "status": status,
                "notes": notes,
                "checks": checks or {},
                "verifiedBy": actor.pk,
                "verifiedAt": timezone.now().isoformat(),
            },
        }
        atomic_transition(
            instance=reporter,
            status_field="kyc_status",
            target_status=status,
            allowed_sources={KycStatus.SUBMITTED.value},
            save_fields=["kyc_data"],
        )
        logger.info("Reporter %s KYC %s by user %s", reporter.pk, status, actor.pk)
        return reporter


# ═══════════════════════════════════════════════════════════════════
#  Scheduled subscription activation
# ═══════════════════════════════════════════════════════════════════


class ReporterSubscriptionService:

    @staticmethod
    def due_for_activation(now=None) -> QuerySet[Reporter]:
        now = now or timezone.now()
        return Reporter.objects.filter(
            subscription_active=False,
            subscription_activation_date__isnull=False,
            subscription_activation_date__lte=now,
        ).select_related("tenant", "designation", "user")

    @staticmethod
    def activate_due_subscriptions(now=None) -> tuple[int, int]:
        """
        Flip ``subscription_active`` on every reporter whose scheduled
        activation date has passed.

        Rows are updated one by one; a failing row is logged and counted
        and does not stop the batch.

        Returns
        -------
        (activated, failed)
        """
        now = now or timezone.now()
        activated = failed = 0

        for reporter in ReporterSubscriptionService.due_for_activation(now):
            try:
                updated = Reporter.objects.filter(
                    pk=reporter.pk, subscription_active=False,
                ).update(subscription_active=True, updated_at=now)
            except DatabaseError:
                failed += 1
                logger.exception("Failed to activate subscription of reporter %s", reporter.pk)
                continue
            if updated:
                activated += 1
                logger.info(
                    "Activated subscription of %s %s in %s",
                    reporter.designation.name, reporter.user.mobile_number, reporter.tenant.name,
                )

        logger.info("Subscription activation complete: %d activated, %d failed", activated, failed)
        return activated, failed


# ═══════════════════════════════════════════════════════════════════
#  Designations
# ═══════════════════════════════════════════════════════════════════


class DesignationService:

    @staticmethod
    def get_for_onboarding(designation_id: Any, *, level: str, tenant_id: Any) -> ReporterDesignation:
        """
        Return the designation if it exists, sits at ``level`` and is
        either global or owned by ``tenant_id``.
        """
        try:
            designation = ReporterDesignation.objects.get(pk=designation_id)
        except (ReporterDesignation.DoesNotExist, ValueError, TypeError):
            raise ValidationError("Invalid designation_id", field="designation_id")

        if designation.level != level:
            raise ValidationError(
                "designation_id does not match requested level", field="designation_id",
            )
        if designation.tenant_id is not None and str(designation.tenant_id) != str(tenant_id):
            raise ValidationError(
                "designation_id does not belong to this tenant", field="designation_id",
            )
        return designation

    @staticmethod
    def list_designations(*, tenant_id: Any = None, level: str | None = None) -> list[ReporterDesignation]:
        """
        Global designations merged with the tenant's own rows by ``code``
        (the tenant row wins), without the tenant-admin designation,
        sorted by level then name.
        """
        qs = ReporterDesignation.objects.exclude(code=TENANT_ADMIN_DESIGNATION_CODE)
        if level:
            qs = qs.filter(level=level)

        merged: dict[str, ReporterDesignation] = {
            d.code: d for d in qs.filter(tenant__isnull=True)
        }
        if tenant_id is not None:
            for designation in qs.filter(tenant_id=tenant_id):
                merged[designation.code] = designation

        return sorted(merged.values(), key=lambda d: (d.level, d.name))
