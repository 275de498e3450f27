"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF hook translating those exceptions into responses.
transactions       Helpers for ``transaction.atomic`` + ``select_for_update``
                   and retried SERIALIZABLE write transactions.
access             Permission-scoped queryset selectors and guards.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.transactions import atomic_transition, run_serializable
    from core.domain.access import apply_permission_scope, require_permission
"""
