"""
Accounts app models.

Defines the dynamic Role system, a custom User model that extends
Django's ``AbstractUser`` and the per-user ``UserProfile``.  Users are
identified by their mobile number; their password doubles as the MPIN
used by the mobile apps.
"""

from django.conf import settings
from django.contrib.auth.models import AbstractUser, Permission
from django.db import models

from core.constants import MAX_MOBILE_DIGITS
from core.models import TimeStampedModel
from core.permissions_constants import AccountsPerms


class Role(models.Model):
    """
    Dynamic, admin-manageable role.

    Roles can be created, modified, or deleted at runtime by a Super
    Admin — no code changes required.  ``hierarchy_level`` encodes the
    relative power of the role (Super Admin > Tenant Admin > Tenant
    Editor > Reporter).

    Custom workflow permissions are defined as constants in
    ``core.permissions_constants`` and registered in each model's
    ``Meta.permissions`` tuple.  Running ``migrate`` populates Django's
    ``auth_permission`` table; the ``setup_rbac`` management command
    then links these permissions to ``Role`` objects — it never
    creates permissions itself.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Role Name",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    hierarchy_level = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Hierarchy Level",
        help_text="Higher value = more authority (e.g. Super Admin=100, Reporter=10).",
    )
    permissions = models.ManyToManyField(
        Permission,
        blank=True,
        verbose_name="Permissions",
        help_text="Specific permissions for this role.",
    )

    class Meta:
        verbose_name = "Role"
        verbose_name_plural = "Roles"
        ordering = ["-hierarchy_level"]

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Platform user (administrator, editor or reporter).

    ``mobile_number`` is the natural key: reporters are provisioned by
    mobile number and log in with it.  ``username`` mirrors the mobile
    number for users created by the platform.

    Each user holds exactly **one** role at a time (FK to ``Role``).
    """

    mobile_number = models.CharField(
        max_length=MAX_MOBILE_DIGITS,
        unique=True,
        verbose_name="Mobile Number",
        db_index=True,
    )
    preferred_language = models.CharField(
        max_length=8,
        default="te",
        verbose_name="Preferred Language",
        help_text="ISO 639-1 code used for notifications and content.",
    )

    # ── Single-role assignment (dynamic RBAC) ────────────────────────
    role = models.ForeignKey(
        Role,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
        verbose_name="Assigned Role",
    )

    # Fields required when creating a superuser via CLI
    REQUIRED_FIELDS = ["mobile_number"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        permissions = [
            (AccountsPerms.CAN_MANAGE_USERS, "Admin-level user management"),
        ]

    def __str__(self):
        role_name = self.role.name if self.role else "No Role"
        return f"{self.mobile_number} - {role_name}"

    def has_role(self, role_name: str) -> bool:
        """Check if the user's current role matches the given name."""
        return self.role is not None and self.role.name == role_name

    @property
    def hierarchy_level(self) -> int:
        """Return the hierarchy_level of the user's role (0 if none)."""
        return self.role.hierarchy_level if self.role else 0

    # ── RBAC Permission Overrides ────────────────────────────────────

    def get_all_permissions(self, obj=None) -> set:
        """
        Return a set of permission strings ('app_label.codename') the user has.
        """
        if not self.is_active:
            return set()

        if self.is_superuser:
            if not hasattr(self, "_superuser_perm_cache"):
                perms = Permission.objects.select_related("content_type").all()
                self._superuser_perm_cache = {
                    f"{p.content_type.app_label}.{p.codename}" for p in perms
                }
            return self._superuser_perm_cache

        if not self.role:
            return set()

        if not hasattr(self, "_perm_cache"):
            perms = self.role.permissions.select_related("content_type")
            self._perm_cache = {f"{p.content_type.app_label}.{p.codename}" for p in perms}

        return self._perm_cache

    def has_perm(self, perm: str, obj=None) -> bool:
        """
        Superusers always have all permissions; everyone else gets the
        permissions of their assigned role.
        """
        if self.is_active and self.is_superuser:
            return True

        return perm in self.get_all_permissions(obj)

    def has_perms(self, perm_list, obj=None) -> bool:
        return all(self.has_perm(perm, obj) for perm in perm_list)

    def has_module_perms(self, app_label: str) -> bool:
        if self.is_active and self.is_superuser:
            return True

        return any(perm.startswith(f"{app_label}.") for perm in self.get_all_permissions())

    @property
    def permissions_list(self) -> list[str]:
        """
        Flat list of ``app_label.codename`` strings, handed to the
        frontend for dynamic UI rendering.
        """
        return sorted(self.get_all_permissions())


class UserProfile(TimeStampedModel):
    """
    Display data attached one-to-one to a ``User``.

    Kept separate from ``User`` so that reporter provisioning can upsert
    the display name without touching authentication fields.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name="User",
    )
    full_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Full Name",
    )
    profile_photo_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        verbose_name="Profile Photo URL",
    )

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"

    def __str__(self):
        return self.full_name or str(self.user)
