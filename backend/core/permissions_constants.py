"""
Permissions Constants — **Single Source of Truth**

Every permission referenced in code (services, ``setup_rbac``, tests)
MUST use one of the constants defined here.

Organisation
------------
- **Standard CRUD** permissions follow Django's auto-generated naming:
  ``<action>_<model_lowercase>``. They are listed here for reference so
  that the ``setup_rbac`` command can map them to roles without typos.

- **Custom workflow** permissions are constants that map to codenames
  registered via each model's ``Meta.permissions`` tuple. Adding a new
  custom permission requires:
    1. Add the constant below.
    2. Add the ``(codename, description)`` to the related model's
       ``Meta.permissions``.
    3. Run ``migrate`` to insert it into Django's ``auth_permission`` table.
    4. Add the constant to the appropriate role lists in ``setup_rbac``.

All constants store the **codename only** (no ``app_label.`` prefix).
Services build the full string when checking, e.g.
``user.has_perm(f"reporters.{ReportersPerms.CAN_CREATE_CHILD_REPORTER}")``.
"""


# ════════════════════════════════════════════════════════════════════
#  ACCOUNTS APP — Standard CRUD
# ════════════════════════════════════════════════════════════════════

class AccountsPerms:
    """Standard CRUD permissions for accounts models."""

    # Role
    VIEW_ROLE = "view_role"
    ADD_ROLE = "add_role"
    CHANGE_ROLE = "change_role"
    DELETE_ROLE = "delete_role"

    # User
    VIEW_USER = "view_user"
    ADD_USER = "add_user"
    CHANGE_USER = "change_user"
    DELETE_USER = "delete_user"

    # ── Custom workflow permissions ─────────────────────────────────
    CAN_MANAGE_USERS = "can_manage_users"
    """Admin-level user management (activate, deactivate, assign roles)."""


# ════════════════════════════════════════════════════════════════════
#  TENANTS APP — Standard CRUD + Custom
# ════════════════════════════════════════════════════════════════════

class TenantsPerms:
    """Standard + custom permissions for the tenants app."""

    # ── Tenant — standard CRUD ──────────────────────────────────────
    VIEW_TENANT = "view_tenant"
    ADD_TENANT = "add_tenant"
    CHANGE_TENANT = "change_tenant"
    DELETE_TENANT = "delete_tenant"

    # ── TenantSettings — standard CRUD ──────────────────────────────
    VIEW_TENANTSETTINGS = "view_tenantsettings"
    CHANGE_TENANTSETTINGS = "change_tenantsettings"

    # ── Custom workflow permissions ─────────────────────────────────
    CAN_MANAGE_ANY_TENANT = "can_manage_any_tenant"
    """Platform-level access to every tenant (no membership required)."""

    CAN_MANAGE_TENANT_SETTINGS = "can_manage_tenant_settings"
    """Read / replace / merge the settings of the user's own tenant."""


# ════════════════════════════════════════════════════════════════════
#  LOCATIONS APP — Standard CRUD
# ════════════════════════════════════════════════════════════════════

class LocationsPerms:
    """Standard CRUD permissions for the geography hierarchy."""

    VIEW_STATE = "view_state"
    ADD_STATE = "add_state"
    CHANGE_STATE = "change_state"

    VIEW_DISTRICT = "view_district"
    ADD_DISTRICT = "add_district"
    CHANGE_DISTRICT = "change_district"

    VIEW_MANDAL = "view_mandal"
    ADD_MANDAL = "add_mandal"
    CHANGE_MANDAL = "change_mandal"

    VIEW_ASSEMBLYCONSTITUENCY = "view_assemblyconstituency"
    ADD_ASSEMBLYCONSTITUENCY = "add_assemblyconstituency"
    CHANGE_ASSEMBLYCONSTITUENCY = "change_assemblyconstituency"


# ════════════════════════════════════════════════════════════════════
#  REPORTERS APP — Standard CRUD + Custom Workflow
# ════════════════════════════════════════════════════════════════════

class ReportersPerms:
    """Standard + custom permissions for the reporters app."""

    # ── Reporter — standard CRUD ────────────────────────────────────
    VIEW_REPORTER = "view_reporter"
    ADD_REPORTER = "add_reporter"
    CHANGE_REPORTER = "change_reporter"
    DELETE_REPORTER = "delete_reporter"

    # ── ReporterDesignation — standard CRUD ─────────────────────────
    VIEW_REPORTERDESIGNATION = "view_reporterdesignation"
    ADD_REPORTERDESIGNATION = "add_reporterdesignation"
    CHANGE_REPORTERDESIGNATION = "change_reporterdesignation"
    DELETE_REPORTERDESIGNATION = "delete_reporterdesignation"

    # ── Custom workflow permissions ─────────────────────────────────
    CAN_CREATE_REPORTER_ANY_TENANT = "can_create_reporter_any_tenant"
    """Platform-level actor: creates reporters in any tenant, no scope row needed."""

    CAN_CREATE_TENANT_REPORTER = "can_create_tenant_reporter"
    """Tenant admin: creates reporters anywhere inside their own tenant."""

    CAN_CREATE_CHILD_REPORTER = "can_create_child_reporter"
    """Reporter: creates reporters only in child levels of their own jurisdiction."""

    CAN_MANAGE_TENANT_REPORTERS = "can_manage_tenant_reporters"
    """Editorial management of reporters (subscription, KYC, deactivation)."""

    CAN_VERIFY_KYC = "can_verify_kyc"
    """Approve or reject a submitted reporter KYC."""
