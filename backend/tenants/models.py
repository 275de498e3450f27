"""
Tenants app models.

A ``Tenant`` is one publication running on the platform.  Its loosely
structured, tenant-managed configuration lives in ``TenantSettings.data``;
the reporter quota and pricing sections of that blob are parsed into
typed objects by ``tenants.config``.
"""

from django.db import models

from core.models import TimeStampedModel
from core.permissions_constants import TenantsPerms


class Tenant(TimeStampedModel):
    """A publication (newspaper / channel) with its own reporter network."""

    name = models.CharField(max_length=255, verbose_name="Name")
    slug = models.SlugField(max_length=100, unique=True, verbose_name="Slug")
    is_active = models.BooleanField(default=True, verbose_name="Active")

    class Meta:
        verbose_name = "Tenant"
        verbose_name_plural = "Tenants"
        ordering = ["name"]
        permissions = [
            (TenantsPerms.CAN_MANAGE_ANY_TENANT, "Can manage every tenant (platform level)"),
        ]

    def __str__(self):
        return self.name


class TenantSettings(TimeStampedModel):
    """
    JSON settings document of a tenant.

    Known top-level keys::

        {
            "reporterLimits":  {"defaultMax": 1, "rules": [...]},
            "reporterPricing": {"subscriptionEnabled": true, ...},
            ...  # any other tenant-managed keys are stored untouched
        }
    """

    tenant = models.OneToOneField(
        Tenant,
        on_delete=models.CASCADE,
        related_name="settings",
        verbose_name="Tenant",
    )
    data = models.JSONField(default=dict, blank=True, verbose_name="Settings Data")

    class Meta:
        verbose_name = "Tenant Settings"
        verbose_name_plural = "Tenant Settings"
        permissions = [
            (TenantsPerms.CAN_MANAGE_TENANT_SETTINGS, "Can read and edit own tenant settings"),
        ]

    def __str__(self):
        return f"Settings of {self.tenant}"
