"""
Smoke tests — verify that Django boots, URL routing resolves, and
the core domain modules behave as the service layers expect.

These tests require a DB only where marked; they do NOT require real
data — they just prove the plumbing works.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from django.urls import resolve, reverse


# ════════════════════════════════════════════════════════════════════
#  URL Routing Smoke Tests
# ════════════════════════════════════════════════════════════════════

class TestURLRouting:
    """Ensure all app URL namespaces resolve."""

    EXPECTED_URLS = [
        # (url_name, kwargs, expected_path)
        ("accounts:login", {}, "/api/accounts/auth/login/"),
        ("accounts:me", {}, "/api/accounts/me/"),
        ("core:system-constants", {}, "/api/core/constants/"),
        ("locations:state-list", {}, "/api/locations/states/"),
        ("tenants:tenant-settings", {"tenant_id": 1}, "/api/tenants/1/settings/"),
        ("reporters:reporter-list", {"tenant_id": 1}, "/api/tenants/1/reporters/"),
        ("reporters:reporter-kyc-verify", {"tenant_id": 1, "pk": 2}, "/api/tenants/1/reporters/2/kyc/verify/"),
        ("reporters:designation-list", {}, "/api/reporter-designations/"),
    ]

    @pytest.mark.parametrize("url_name,kwargs,expected", EXPECTED_URLS)
    def test_url_reverses(self, url_name: str, kwargs: dict, expected: str):
        assert reverse(url_name, kwargs=kwargs) == expected

    @pytest.mark.parametrize("url_name,kwargs,expected", EXPECTED_URLS)
    def test_path_resolves_to_view(self, url_name: str, kwargs: dict, expected: str):
        match = resolve(expected)
        assert f"{match.namespace}:{match.url_name}" == url_name


# ════════════════════════════════════════════════════════════════════
#  Exception Behaviour Tests
# ════════════════════════════════════════════════════════════════════

class TestDomainExceptions:

    def test_hierarchy(self):
        from core.domain.exceptions import (
            AuthorizationError,
            ConflictError,
            DomainError,
            InvalidTransition,
            NotFound,
            QuotaExceededError,
            ValidationError,
        )
        for exc_class in (
            AuthorizationError, ConflictError, InvalidTransition,
            NotFound, QuotaExceededError, ValidationError,
        ):
            assert issubclass(exc_class, DomainError)

    def test_invalid_transition_structured(self):
        from core.domain.exceptions import InvalidTransition
        err = InvalidTransition(current="PENDING", target="APPROVED", reason="not submitted")
        assert "PENDING" in str(err)
        assert "APPROVED" in str(err)
        assert err.current == "PENDING"

    def test_quota_exceeded_payload(self):
        from core.domain.exceptions import QuotaExceededError
        err = QuotaExceededError(
            current=2, max_allowed=2, designation_id="7",
            level="MANDAL", location_field="mandalId", location_id="12",
        )
        assert str(err) == "Reporter limit reached"
        assert err.extra == {
            "current": 2,
            "maxAllowed": 2,
            "designationId": "7",
            "level": "MANDAL",
            "mandalId": "12",
        }

    def test_validation_error_names_field(self):
        from core.domain.exceptions import ValidationError
        assert ValidationError("bad", field="level").extra == {"field": "level"}


# ════════════════════════════════════════════════════════════════════
#  Access Helper Unit Tests
# ════════════════════════════════════════════════════════════════════

class TestAccessHelpers:

    def _user(self, *perms):
        user = MagicMock()
        user.is_superuser = False
        user.has_perm.side_effect = lambda perm: perm in perms
        return user

    def test_first_matching_scope_rule_wins(self):
        from core.domain.access import apply_permission_scope

        qs = MagicMock()
        narrowed = MagicMock()
        result = apply_permission_scope(
            qs, self._user("reporters.view_reporter"),
            scope_rules=[
                ("tenants.can_manage_any_tenant", lambda q, u: q),
                ("reporters.view_reporter", lambda q, u: narrowed),
            ],
        )
        assert result is narrowed

    def test_no_matching_rule_returns_empty(self):
        from core.domain.access import apply_permission_scope

        qs = MagicMock()
        apply_permission_scope(qs, self._user(), scope_rules=[])
        qs.none.assert_called_once()

    def test_require_permission_accepts_any(self):
        from core.domain.access import require_permission
        require_permission(self._user("b"), "a", "b")

    def test_require_permission_raises(self):
        from core.domain.access import require_permission
        from core.domain.exceptions import AuthorizationError

        with pytest.raises(AuthorizationError, match="nope"):
            require_permission(self._user(), "a", message="nope")


# ════════════════════════════════════════════════════════════════════
#  Transaction Helper Unit Tests
# ════════════════════════════════════════════════════════════════════

class TestSerializationFailureDetection:

    def test_detects_by_message(self):
        from django.db import OperationalError
        from core.domain.transactions import is_serialization_failure

        assert is_serialization_failure(OperationalError("could not serialize access due to concurrent update"))
        assert is_serialization_failure(OperationalError("deadlock detected"))
        assert is_serialization_failure(OperationalError("database table is locked: reporters_reporter"))
        assert not is_serialization_failure(OperationalError("disk I/O error"))

    def test_detects_by_sqlstate(self):
        from django.db import OperationalError
        from core.domain.transactions import is_serialization_failure

        class DriverError(Exception):
            sqlstate = "40001"

        err = OperationalError("serialization failure")
        err.__cause__ = DriverError()
        assert is_serialization_failure(err)

    def test_ignores_non_database_errors(self):
        from core.domain.transactions import is_serialization_failure
        assert not is_serialization_failure(ValueError("could not serialize access"))
