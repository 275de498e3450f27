"""
core.domain.transactions — Helpers for safe state transitions and
serializable write transactions.

Provides utilities that wrap ``transaction.atomic`` and
``select_for_update`` into reusable patterns so that every app's
service layer follows the same concurrency-safe approach.

Design goals
------------
* Eliminate boilerplate around ``with transaction.atomic(): ...``
  inside service methods.
* Ensure that state-transition reads always lock the row first
  (``select_for_update``) to prevent race conditions.
* Give count-then-insert flows (quota checks) a SERIALIZABLE
  transaction with a bounded, jittered retry on serialization
  failures and deadlocks.

Usage::

    from core.domain.transactions import atomic_transition

    reporter = atomic_transition(
        instance=reporter,
        status_field="kyc_status",
        target_status="APPROVED",
        allowed_sources={"SUBMITTED"},
    )

    # Serializable, retried once on conflict:
    from core.domain.transactions import run_serializable

    reporter = run_serializable(_create_rows, actor, tenant_id, data)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

from django.db import DatabaseError, models, transaction
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from core.domain.exceptions import ConflictError, InvalidTransition, NotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=models.Model)

#: SQLSTATEs PostgreSQL raises for serialization failures and deadlocks.
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})

#: Message fragments used when the driver does not expose a SQLSTATE.
_RETRYABLE_MESSAGES = (
    "could not serialize access",
    "deadlock",
    "database is locked",
    "table is locked",
)

#: A serializable block is always given at least one retry.
MIN_SERIALIZABLE_ATTEMPTS = 2


def atomic_transition(
    *,
    instance: M,
    status_field: str = "status",
    target_status: str,
    allowed_sources: Iterable[str] | None = None,
    save_fields: Iterable[str] | None = None,
) -> M:
    """
    Atomically transition a model instance from one status to another.

    Steps performed inside ``transaction.atomic()``:
        1. Re-fetch the instance with ``select_for_update()`` to acquire
           a row-level lock.
        2. Read the current value of ``status_field``.
        3. If ``allowed_sources`` is provided, verify the current value
           is among them; raise ``InvalidTransition`` otherwise.
        4. Copy any ``save_fields`` values from ``instance`` onto the
           locked row, set ``status_field`` to ``target_status`` and save.
        5. Refresh and return the caller's instance.

    Args:
        instance:        The model instance to transition.
        status_field:    Name of the status field on the model.
                         Defaults to ``"status"``.
        target_status:   The desired new value.
        allowed_sources: Optional set/list of status values from which
                         the transition is permitted.  ``None`` means
                         any current value is accepted (use with care).
        save_fields:     Extra fields, already set on ``instance``, to
                         persist together with the status change.

    Returns:
        The same instance with the updated field value persisted.

    Raises:
        NotFound:          If the instance no longer exists in the DB.
        InvalidTransition: If the current status is not in ``allowed_sources``.
    """
    model_class = type(instance)
    save_fields = list(save_fields or [])

    with transaction.atomic():
        locked = lock_for_update(model_class, instance.pk)

        current = getattr(locked, status_field)

        if allowed_sources is not None and current not in allowed_sources:
            raise InvalidTransition(
                current=str(current),
                target=target_status,
                reason=(
                    f"allowed source states: "
                    f"{', '.join(sorted(str(s) for s in allowed_sources))}"
                ),
            )

        for field in save_fields:
            setattr(locked, field, getattr(instance, field))
        setattr(locked, status_field, target_status)

        update_fields = {status_field, "updated_at", *save_fields}
        locked.save(update_fields=list(update_fields))

    # Refresh caller's reference
    instance.refresh_from_db()
    return instance


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")


# ── Serializable transactions ────────────────────────────────────────


def is_serialization_failure(exc: BaseException) -> bool:
    """
    Return ``True`` when ``exc`` is a transient concurrency failure that
    is worth retrying: a PostgreSQL serialization failure (40001), a
    deadlock (40P01), or SQLite's lock contention errors (a busy
    database file, or a locked table on a shared-cache connection).
    """
    if not isinstance(exc, DatabaseError):
        return False

    cause = exc.__cause__
    sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True

    message = str(exc).lower()
    return any(fragment in message for fragment in _RETRYABLE_MESSAGES)


def _atomic_serializable(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    connection = transaction.get_connection()
    outermost = not connection.in_atomic_block

    with transaction.atomic():
        # The isolation level can only be chosen before the transaction's
        # first statement, i.e. on the outermost block.  SQLite
        # transactions are serializable already.
        if outermost and connection.vendor == "postgresql":
            with connection.cursor() as cursor:
                cursor.execute("SET TRANSACTION ISOLATION LEVEL SERIALIZABLE")
        return fn(*args, **kwargs)


def _log_retry(retry_state: RetryCallState) -> None:
    # args[0] is the wrapped service callable handed to _atomic_serializable
    fn = retry_state.args[0] if retry_state.args else retry_state.fn
    logger.warning(
        "Serializable transaction %s failed on attempt %d (%s); retrying.",
        getattr(fn, "__name__", fn),
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else "unknown",
    )


def run_serializable(
    fn: Callable[..., T],
    *args: Any,
    max_attempts: int = MIN_SERIALIZABLE_ATTEMPTS,
    wait_max: float = 0.2,
    **kwargs: Any,
) -> T:
    """
    Execute ``fn(*args, **kwargs)`` in a SERIALIZABLE transaction,
    retrying the whole transaction on serialization failure or deadlock.

    Retries use ``tenacity`` with a jittered exponential wait capped at
    ``wait_max`` seconds.  ``max_attempts`` counts the first try and is
    clamped to at least two, so every call gets one retry.

    When already inside an atomic block (e.g. a caller's transaction or
    a ``TestCase``), the isolation level is inherited and no retry is
    attempted: the enclosing transaction is the unit that must restart.

    Raises:
        ConflictError: If the last attempt still failed with a
            serialization failure / deadlock.
        Any other exception raised by ``fn`` unchanged — the
            transaction is rolled back and nothing is retried.
    """
    if transaction.get_connection().in_atomic_block:
        try:
            return _atomic_serializable(fn, *args, **kwargs)
        except DatabaseError as exc:
            if is_serialization_failure(exc):
                raise ConflictError() from exc
            raise

    retrying = Retrying(
        stop=stop_after_attempt(max(max_attempts, MIN_SERIALIZABLE_ATTEMPTS)),
        wait=wait_random_exponential(multiplier=0.05, max=wait_max),
        retry=retry_if_exception(is_serialization_failure),
        before_sleep=_log_retry,
        reraise=True,
    )

    try:
        return retrying(_atomic_serializable, fn, *args, **kwargs)
    except DatabaseError as exc:
        if is_serialization_failure(exc):
            logger.error(
                "Serializable transaction %s gave up after %d attempt(s): %s",
                getattr(fn, "__name__", fn),
                retrying.statistics.get("attempt_number", max_attempts),
                exc,
            )
            raise ConflictError() from exc
        raise
