"""
Management command: setup_rbac
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the database with the newsroom **Roles** and links each role to
its set of Django permissions.

This command does NOT create Permission objects.  Standard CRUD
permissions are created by Django after ``migrate``; custom workflow
permissions are declared in each model's ``Meta.permissions`` tuple and
inserted by ``migrate`` as well.

The command is **idempotent** — safe to run multiple times.  Existing
roles are updated; permissions are replaced (set) to match the
mapping below.

Usage::

    python manage.py setup_rbac
"""

from django.contrib.auth.models import Permission
from django.core.management.base import BaseCommand

from accounts.models import Role
from core.permissions_constants import (
    AccountsPerms,
    LocationsPerms,
    ReportersPerms,
    TenantsPerms,
)

_LOCATION_READ = [
    LocationsPerms.VIEW_STATE, LocationsPerms.VIEW_DISTRICT,
    LocationsPerms.VIEW_MANDAL, LocationsPerms.VIEW_ASSEMBLYCONSTITUENCY,
]

_LOCATION_WRITE = [
    LocationsPerms.ADD_STATE, LocationsPerms.CHANGE_STATE,
    LocationsPerms.ADD_DISTRICT, LocationsPerms.CHANGE_DISTRICT,
    LocationsPerms.ADD_MANDAL, LocationsPerms.CHANGE_MANDAL,
    LocationsPerms.ADD_ASSEMBLYCONSTITUENCY, LocationsPerms.CHANGE_ASSEMBLYCONSTITUENCY,
]

_DESIGNATION_READ = [ReportersPerms.VIEW_REPORTERDESIGNATION]

# ────────────────────────────────────────────────────────────────────
# Role → Permission mapping  (uses constants — zero hard-coded strings)
# ────────────────────────────────────────────────────────────────────
# Key:   (role_name, description, hierarchy_level)
# Value: list of codenames from ``core.permissions_constants``

ROLE_PERMISSIONS_MAP: dict[tuple[str, str, int], list[str]] = {

    # ── Platform administrator ──────────────────────────────────────
    (
        "Super Admin",
        "Platform-wide access across every tenant.",
        100,
    ): [
        AccountsPerms.VIEW_ROLE, AccountsPerms.ADD_ROLE,
        AccountsPerms.CHANGE_ROLE, AccountsPerms.DELETE_ROLE,
        AccountsPerms.VIEW_USER, AccountsPerms.ADD_USER,
        AccountsPerms.CHANGE_USER, AccountsPerms.DELETE_USER,
        AccountsPerms.CAN_MANAGE_USERS,
        TenantsPerms.VIEW_TENANT, TenantsPerms.ADD_TENANT,
        TenantsPerms.CHANGE_TENANT, TenantsPerms.DELETE_TENANT,
        TenantsPerms.VIEW_TENANTSETTINGS, TenantsPerms.CHANGE_TENANTSETTINGS,
        TenantsPerms.CAN_MANAGE_ANY_TENANT, TenantsPerms.CAN_MANAGE_TENANT_SETTINGS,
        *_LOCATION_READ, *_LOCATION_WRITE,
        ReportersPerms.VIEW_REPORTER, ReportersPerms.ADD_REPORTER,
        ReportersPerms.CHANGE_REPORTER, ReportersPerms.DELETE_REPORTER,
        ReportersPerms.VIEW_REPORTERDESIGNATION, ReportersPerms.ADD_REPORTERDESIGNATION,
        ReportersPerms.CHANGE_REPORTERDESIGNATION, ReportersPerms.DELETE_REPORTERDESIGNATION,
        ReportersPerms.CAN_CREATE_REPORTER_ANY_TENANT,
        ReportersPerms.CAN_MANAGE_TENANT_REPORTERS,
        ReportersPerms.CAN_VERIFY_KYC,
    ],

    # ── Tenant administrator ────────────────────────────────────────
    (
        "Tenant Admin",
        "Runs one tenant: settings, designations and the reporter network.",
        50,
    ): [
        TenantsPerms.VIEW_TENANT,
        TenantsPerms.VIEW_TENANTSETTINGS, TenantsPerms.CHANGE_TENANTSETTINGS,
        TenantsPerms.CAN_MANAGE_TENANT_SETTINGS,
        *_LOCATION_READ,
        ReportersPerms.VIEW_REPORTER, ReportersPerms.ADD_REPORTER,
        ReportersPerms.CHANGE_REPORTER,
        ReportersPerms.VIEW_REPORTERDESIGNATION, ReportersPerms.ADD_REPORTERDESIGNATION,
        ReportersPerms.CHANGE_REPORTERDESIGNATION,
        ReportersPerms.CAN_CREATE_TENANT_REPORTER,
        ReportersPerms.CAN_MANAGE_TENANT_REPORTERS,
        ReportersPerms.CAN_VERIFY_KYC,
    ],

    # ── Tenant editor ───────────────────────────────────────────────
    (
        "Tenant Editor",
        "Desk editor: reviews the tenant's reporters without onboarding them.",
        30,
    ): [
        TenantsPerms.VIEW_TENANT,
        *_LOCATION_READ,
        *_DESIGNATION_READ,
        ReportersPerms.VIEW_REPORTER, ReportersPerms.CHANGE_REPORTER,
        ReportersPerms.CAN_MANAGE_TENANT_REPORTERS,
    ],

    # ── Field reporter ──────────────────────────────────────────────
    (
        "Reporter",
        "Field reporter; may onboard reporters below their own level.",
        10,
    ): [
        *_LOCATION_READ,
        *_DESIGNATION_READ,
        ReportersPerms.VIEW_REPORTER,
        ReportersPerms.CAN_CREATE_CHILD_REPORTER,
    ],
}


class Command(BaseCommand):
    help = (
        "Seed the newsroom roles and link each to its permission set. "
        "Idempotent: safe to run repeatedly."
    )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  RBAC Setup — Seeding Roles & Permissions"
            "\n══════════════════════════════════════════\n"
        ))

        # Codenames are unique across the project's apps
        all_permissions: dict[str, Permission] = {
            p.codename: p
            for p in Permission.objects.select_related("content_type").all()
        }

        roles_created = 0
        roles_updated = 0
        warnings = 0

        for (role_name, description, hierarchy_level), codenames in ROLE_PERMISSIONS_MAP.items():
            role, created = Role.objects.update_or_create(
                name=role_name,
                defaults={
                    "description": description,
                    "hierarchy_level": hierarchy_level,
                },
            )

            resolved_permissions: list[Permission] = []
            for codename in codenames:
                perm = all_permissions.get(codename)
                if perm is None:
                    warnings += 1
                    self.stdout.write(self.style.WARNING(
                        f"  ⚠  Permission '{codename}' not found — "
                        f"skipped for role '{role_name}'.  (Run migrate first?)"
                    ))
                    continue
                resolved_permissions.append(perm)

            role.permissions.set(resolved_permissions)

            if created:
                roles_created += 1
            else:
                roles_updated += 1

            self.stdout.write(self.style.SUCCESS(
                f"  ✔  {'Created' if created else 'Updated'} role: {role_name:<14s} "
                f"(hierarchy={hierarchy_level}, "
                f"permissions={len(resolved_permissions)})"
            ))

        summary = (
            f"  Done!  {roles_created} role(s) created, "
            f"{roles_updated} role(s) updated."
        )
        if warnings:
            summary += f"  ({warnings} permission warning(s) — see above.)"
        self.stdout.write(self.style.SUCCESS(summary + "\n"))
