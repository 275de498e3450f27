"""
core.domain.access — Permission-scoped queryset selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to obtain querysets filtered by the requesting user's permissions.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.         ║
║  Each app's ``services.py`` owns its own scope-rules list.     ║
║  This module provides:                                         ║
║    1) ``apply_permission_scope`` — ordered permission dispatch.║
║    2) ``require_permission`` — guard that checks has_perm.     ║
╚══════════════════════════════════════════════════════════════════╝

Usage in an app's service layer (the rule list of
``reporters.services.ReporterQueryService.base_queryset``)::

    from core.domain.access import apply_permission_scope

    REPORTER_SCOPE_RULES = [
        ("tenants.can_manage_any_tenant", lambda qs, u: qs),
        ("reporters.view_reporter",
         lambda qs, u: qs.filter(tenant__reporters__user=u,
                                 tenant__reporters__active=True).distinct()),
    ]

    qs = apply_permission_scope(Reporter.objects.filter(tenant_id=tenant_id),
                                user, scope_rules=REPORTER_SCOPE_RULES)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import AuthorizationError

if TYPE_CHECKING:
    from accounts.models import User

# Type alias for a scope filter function.
# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

# Type alias for a single scope rule: (permission_codename, filter_fn).
# Permission codename includes the app label (e.g. "reporters.view_reporter").
ScopeRule = tuple[str, ScopeFilter]


def apply_permission_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: list[ScopeRule],
    default: str = "none",
) -> QuerySet:
    """
    Apply the first matching permission-based scope rule.

    Rules are checked **in order** — first permission match wins.
    Order rules from broadest (unrestricted) to narrowest (most restricted)
    so that users with wider access hit their rule first.

    Args:
        queryset:     Base (unfiltered) queryset.
        user:         The authenticated user.
        scope_rules:  Ordered list of ``(perm_codename, filter_fn)`` tuples.
        default:      What to do when no matching permission is found.
                      ``"none"`` (default) → empty queryset.
                      ``"all"`` → return unfiltered.
    """
    for perm, filter_fn in scope_rules:
        if user.has_perm(perm):
            return filter_fn(queryset, user)

    if default == "none":
        return queryset.none()
    return queryset


def require_permission(user: User, *perms: str, message: str = "") -> None:
    """
    Guard that raises ``AuthorizationError`` if the user lacks **all** of
    the given permissions (OR-logic: having any one is sufficient).

    Example::

        require_permission(user, "tenants.can_manage_tenant_settings")
    """
    for perm in perms:
        if user.has_perm(perm):
            return
    raise AuthorizationError(
        message or f"Missing required permission: {', '.join(perms)}."
    )
