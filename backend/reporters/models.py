"""
Reporters app models.

A ``Reporter`` is one person's editorial position inside one tenant at
one geographic level.  The level decides which single location foreign
key is populated; a database check constraint keeps the two in step.
``ReporterDesignation`` rows are the role templates ("District Bureau
Chief", "Mandal Reporter", ...) a reporter is hired under; global rows
have no tenant and can be overridden per tenant by ``code``.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel
from core.permissions_constants import ReportersPerms


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ReporterLevel(models.TextChoices):
    STATE = "STATE", "State"
    DISTRICT = "DISTRICT", "District"
    MANDAL = "MANDAL", "Mandal"
    ASSEMBLY = "ASSEMBLY", "Assembly Constituency"


class KycStatus(models.TextChoices):
    """
    KYC workflow::

        PENDING ──submit──▶ SUBMITTED ──verify──▶ APPROVED
           ▲                    │
           └──── REJECTED ◀─────┘  (a rejected KYC may be resubmitted)
    """

    PENDING = "PENDING", "Pending"
    SUBMITTED = "SUBMITTED", "Submitted"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


#: Level → (model field, request/config key) of the one populated location.
LEVEL_LOCATION_FIELDS: dict[str, tuple[str, str]] = {
    ReporterLevel.STATE.value: ("state", "stateId"),
    ReporterLevel.DISTRICT.value: ("district", "districtId"),
    ReporterLevel.MANDAL.value: ("mandal", "mandalId"),
    ReporterLevel.ASSEMBLY.value: ("assembly_constituency", "assemblyConstituencyId"),
}

LOCATION_FIELDS: tuple[str, ...] = tuple(f for f, _ in LEVEL_LOCATION_FIELDS.values())

#: Designation code reserved for tenant administrators; never offered
#: when onboarding reporters.
TENANT_ADMIN_DESIGNATION_CODE = "TENANT_ADMIN"


def _only_location(level: str) -> Q:
    populated, _ = LEVEL_LOCATION_FIELDS[level]
    condition = Q(level=level, **{f"{populated}__isnull": False})
    for field in LOCATION_FIELDS:
        if field != populated:
            condition &= Q(**{f"{field}__isnull": True})
    return condition


# ────────────────────────────────────────────────────────────────────
# Designations
# ────────────────────────────────────────────────────────────────────

class ReporterDesignation(TimeStampedModel):
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="reporter_designations",
        verbose_name="Tenant",
        help_text="Empty for platform-wide designations.",
    )
    code = models.CharField(max_length=64, verbose_name="Code")
    name = models.CharField(max_length=255, verbose_name="Name")
    level = models.CharField(
        max_length=16,
        choices=ReporterLevel.choices,
        verbose_name="Level",
    )

    class Meta:
        verbose_name = "Reporter Designation"
        verbose_name_plural = "Reporter Designations"
        ordering = ["level", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "code"],
                name="uniq_designation_code_per_tenant",
            ),
            models.UniqueConstraint(
                fields=["code"],
                condition=Q(tenant__isnull=True),
                name="uniq_global_designation_code",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_level_display()})"


# ────────────────────────────────────────────────────────────────────
# Reporters
# ────────────────────────────────────────────────────────────────────

class Reporter(TimeStampedModel):
    """
    Never hard-deleted: deactivation sets ``active=False`` and frees the
    reporter's slot in its quota bucket.
    """

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="reporters",
        verbose_name="Tenant",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reporter_positions",
        verbose_name="User",
    )
    designation = models.ForeignKey(
        ReporterDesignation,
        on_delete=models.PROTECT,
        related_name="reporters",
        verbose_name="Designation",
    )
    level = models.CharField(
        max_length=16,
        choices=ReporterLevel.choices,
        verbose_name="Level",
    )

    # ── Location: exactly the one implied by ``level`` ───────────────
    state = models.ForeignKey(
        "locations.State", on_delete=models.PROTECT,
        null=True, blank=True, related_name="reporters", verbose_name="State",
    )
    district = models.ForeignKey(
        "locations.District", on_delete=models.PROTECT,
        null=True, blank=True, related_name="reporters", verbose_name="District",
    )
    mandal = models.ForeignKey(
        "locations.Mandal", on_delete=models.PROTECT,
        null=True, blank=True, related_name="reporters", verbose_name="Mandal",
    )
    assembly_constituency = models.ForeignKey(
        "locations.AssemblyConstituency", on_delete=models.PROTECT,
        null=True, blank=True, related_name="reporters",
        verbose_name="Assembly Constituency",
    )

    # ── Subscription & charges (smallest currency unit) ──────────────
    subscription_active = models.BooleanField(default=False, verbose_name="Subscription Active")
    monthly_subscription_amount = models.PositiveIntegerField(default=0, verbose_name="Monthly Subscription Amount")
    id_card_charge = models.PositiveIntegerField(default=0, verbose_name="ID Card Charge")
    subscription_activation_date = models.DateTimeField(
        null=True, blank=True,
        verbose_name="Scheduled Subscription Activation",
    )

    # ── Manual (non-subscription) login window ───────────────────────
    manual_login_enabled = models.BooleanField(default=False, verbose_name="Manual Login Enabled")
    manual_login_days = models.PositiveIntegerField(null=True, blank=True, verbose_name="Manual Login Days")
    manual_login_expires_at = models.DateTimeField(null=True, blank=True, verbose_name="Manual Login Expires At")

    # ── KYC ──────────────────────────────────────────────────────────
    kyc_status = models.CharField(
        max_length=16,
        choices=KycStatus.choices,
        default=KycStatus.PENDING,
        verbose_name="KYC Status",
    )
    kyc_data = models.JSONField(default=dict, blank=True, verbose_name="KYC Data")

    profile_photo_url = models.URLField(max_length=500, blank=True, default="", verbose_name="Profile Photo URL")
    auto_publish = models.BooleanField(default=False, verbose_name="Auto Publish")
    active = models.BooleanField(default=True, verbose_name="Active")

    class Meta:
        verbose_name = "Reporter"
        verbose_name_plural = "Reporters"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tenant", "designation", "level", "active"]),
            models.Index(fields=["user", "tenant"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    _only_location(ReporterLevel.STATE.value)
                    | _only_location(ReporterLevel.DISTRICT.value)
                    | _only_location(ReporterLevel.MANDAL.value)
                    | _only_location(ReporterLevel.ASSEMBLY.value)
                ),
                name="reporter_location_matches_level",
            ),
        ]
        permissions = [
            (ReportersPerms.CAN_CREATE_REPORTER_ANY_TENANT, "Can create reporters in any tenant"),
            (ReportersPerms.CAN_CREATE_TENANT_REPORTER, "Can create reporters in own tenant"),
            (ReportersPerms.CAN_CREATE_CHILD_REPORTER, "Can create reporters below own level"),
            (ReportersPerms.CAN_MANAGE_TENANT_REPORTERS, "Can manage reporters of own tenant"),
            (ReportersPerms.CAN_VERIFY_KYC, "Can approve or reject reporter KYC"),
        ]

    def __str__(self):
        return f"Reporter #{self.pk} ({self.level}) in tenant {self.tenant_id}"

    @property
    def location_field(self) -> str:
        return LEVEL_LOCATION_FIELDS[self.level][0]

    @property
    def location_id(self):
        return getattr(self, f"{self.location_field}_id")
