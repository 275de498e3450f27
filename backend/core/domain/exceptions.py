"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global DRF exception handler in
``core.domain.exception_handler`` maps them to HTTP responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────────────────────────────────────┬──────┐
│ Domain Exception    │ Meaning                              │ Code │
├─────────────────────┼──────────────────────────────────────┼──────┤
│ DomainError         │ Generic business-rule violation      │ 400  │
│ ValidationError     │ Missing / malformed input            │ 400  │
│ AuthorizationError  │ Role, tenant, scope or subscription  │ 403  │
│ NotFound            │ Resource missing or not visible      │ 404  │
│ InvalidTransition   │ Disallowed status transition         │ 409  │
│ QuotaExceededError  │ Reporter quota bucket is full        │ 409  │
│ ConflictError       │ Serialization conflict after retries │ 503  │
└─────────────────────┴──────────────────────────────────────┴──────┘

Every exception exposes ``extra`` — a dict merged into the response body
next to ``detail`` so clients can render structured context (for example
the current count and limit of a full quota bucket).

Recommended usage inside a service::

    from core.domain.exceptions import AuthorizationError

    if not decision.allowed:
        raise AuthorizationError(decision.reason)
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        self.extra: dict[str, Any] = {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """
    Required input is missing or malformed.

    Never retried.  Maps to HTTP 400.
    """

    def __init__(self, message: str = "Invalid input.", *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
        if field:
            self.extra["field"] = field


class AuthorizationError(DomainError):
    """
    The authenticated user may not perform this operation: wrong role,
    wrong tenant, inactive account, inactive subscription, or a target
    outside the user's geographic scope.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist (or is not visible to the
    requesting user given their tenant scope).

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class InvalidTransition(DomainError):
    """
    A state-machine transition that is not allowed from the current status.

    Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="PENDING",
            target="APPROVED",
            reason="KYC must be submitted before it can be verified.",
        )
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason


class QuotaExceededError(DomainError):
    """
    The (tenant, designation, level, location) quota bucket already holds
    as many active reporters as the tenant configuration allows.

    Carries ``current`` and ``max_allowed`` plus the bucket coordinates so
    the client can explain the denial.  Maps to HTTP 409.
    """

    def __init__(
        self,
        *,
        current: int,
        max_allowed: int,
        designation_id: Any = None,
        level: str | None = None,
        location_field: str | None = None,
        location_id: Any = None,
    ) -> None:
        super().__init__("Reporter limit reached")
        self.current = current
        self.max_allowed = max_allowed
        self.extra.update({
            "current": current,
            "maxAllowed": max_allowed,
            "designationId": designation_id,
            "level": level,
        })
        if location_field:
            self.extra[location_field] = location_id


class ConflictError(DomainError):
    """
    A write transaction kept failing with a serialization conflict or a
    deadlock after its bounded retries.  Nothing was committed; the client
    may safely retry later.

    Maps to HTTP 503.
    """

    def __init__(
        self,
        message: str = "The request conflicted with a concurrent update. Please retry.",
    ) -> None:
        super().__init__(message)
