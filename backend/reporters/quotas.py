"""
reporters.quotas — maximum active reporters per quota bucket.

A quota bucket is ``(tenant, designation, level, location)``.  The
tenant's ``reporterLimits`` rules are ranked, and the first rank that
has a matching rule wins::

    1. exact               designation + level + the bucket's location
    2. level wildcard      designation + level, no location pinned
    3. designation wildcard designation only, no level
    4. ``default_max``

Within one rank the first rule in configuration order wins.  With no
configuration at all the limit is ``DEFAULT_REPORTER_MAX``: quotas are
always enforced.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from core.constants import DEFAULT_REPORTER_MAX
from tenants.config import LimitRule, ReporterLimits


def _same(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def _matchers(
    designation_id: Any,
    level: str,
    location_field: str,
    location_id: Any,
) -> Iterable[Callable[[LimitRule], bool]]:
    def for_designation(rule: LimitRule) -> bool:
        return _same(rule.designation_id, designation_id)

    def exact(rule: LimitRule) -> bool:
        return (
            for_designation(rule)
            and _same(rule.level, level)
            and rule.location_filter is not None
            and rule.location_filter[0] == location_field
            and _same(rule.location_filter[1], location_id)
        )

    def level_wildcard(rule: LimitRule) -> bool:
        return for_designation(rule) and rule.is_level_wildcard and _same(rule.level, level)

    def designation_wildcard(rule: LimitRule) -> bool:
        return for_designation(rule) and rule.is_designation_wildcard

    return (exact, level_wildcard, designation_wildcard)


def resolve_max(
    limits: ReporterLimits | None,
    designation_id: Any,
    level: str,
    location_field: str,
    location_id: Any,
) -> int:
    """
    Return the maximum number of active reporters allowed in the bucket.

    ``location_field`` is the configuration key of the bucket's location
    (``"mandalId"``, ``"districtId"``, ...).  Pure: performs no I/O.
    """
    if limits is None:
        return DEFAULT_REPORTER_MAX

    for matches in _matchers(designation_id, level, location_field, location_id):
        for rule in limits.rules:
            if matches(rule):
                return rule.max

    return limits.default_max
