"""
Typed views over the reporter sections of ``TenantSettings.data``.

The JSON document is tenant-managed and stored as entered (camelCase
keys).  This module turns its ``reporterLimits`` and ``reporterPricing``
sections into immutable objects so the quota and pricing rules never
poke at optional dict keys directly.

Stored shape::

    "reporterLimits": {
        "defaultMax": 1,
        "rules": [
            {"designationId": "7", "level": "MANDAL", "mandalId": "12", "max": 2},
            {"designationId": "7", "level": "DISTRICT", "max": 1},
            {"designationId": "9", "max": 3}
        ]
    },
    "reporterPricing": {
        "subscriptionEnabled": true,
        "currency": "INR",
        "defaultMonthlyAmount": 9900,
        "defaultIdCardCharge": 4900,
        "byDesignation": [{"designationId": "7", "monthlyAmount": 4900}]
    }

Amounts are integers in the smallest currency unit.  Identifier values
are compared as strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.constants import DEFAULT_REPORTER_MAX

LIMITS_KEY = "reporterLimits"
PRICING_KEY = "reporterPricing"

#: Rule keys that pin a limit to one location.  At most one may be set.
LOCATION_KEYS = ("stateId", "districtId", "mandalId", "assemblyConstituencyId")

LEVELS = ("STATE", "DISTRICT", "MANDAL", "ASSEMBLY")


class ConfigurationError(ValueError):
    """A reporter settings section does not have the expected shape."""


# ── Value types ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class LimitRule:
    """
    One quota rule.  ``level`` and ``location_filter`` are optional;
    leaving them unset widens the rule to every level / location.
    """

    designation_id: str
    max: int
    level: str | None = None
    location_filter: tuple[str, str] | None = None

    @property
    def is_level_wildcard(self) -> bool:
        return self.level is not None and self.location_filter is None

    @property
    def is_designation_wildcard(self) -> bool:
        return self.level is None


@dataclass(frozen=True)
class ReporterLimits:
    default_max: int = DEFAULT_REPORTER_MAX
    rules: tuple[LimitRule, ...] = ()


@dataclass(frozen=True)
class DesignationPrice:
    designation_id: str
    monthly_amount: int | None = None
    id_card_charge: int | None = None


@dataclass(frozen=True)
class ResolvedPricing:
    subscription_enabled: bool
    monthly_amount: int
    id_card_charge: int


@dataclass(frozen=True)
class ReporterPricing:
    subscription_enabled: bool = False
    currency: str = "INR"
    default_monthly_amount: int = 0
    default_id_card_charge: int = 0
    by_designation: tuple[DesignationPrice, ...] = field(default_factory=tuple)

    def resolve(self, designation_id: Any) -> ResolvedPricing:
        """
        Price a designation: a ``byDesignation`` row overrides the
        defaults field by field; the monthly amount is 0 whenever
        subscriptions are disabled for the tenant.
        """
        wanted = str(designation_id)
        row = next(
            (p for p in self.by_designation if p.designation_id == wanted),
            None,
        )
        monthly = self.default_monthly_amount
        id_card = self.default_id_card_charge
        if row is not None:
            if row.monthly_amount is not None:
                monthly = row.monthly_amount
            if row.id_card_charge is not None:
                id_card = row.id_card_charge
        return ResolvedPricing(
            subscription_enabled=self.subscription_enabled,
            monthly_amount=monthly if self.subscription_enabled else 0,
            id_card_charge=id_card,
        )


# ── Parsing ──────────────────────────────────────────────────────────


def _identifier(value: Any, name: str) -> str:
    if value is None or isinstance(value, (bool, dict, list)):
        raise ConfigurationError(f"{name} must be a string or integer id")
    text = str(value).strip()
    if not text:
        raise ConfigurationError(f"{name} must not be empty")
    return text


def _amount(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative integer")
    return value


def _optional_amount(raw: dict, key: str) -> int | None:
    if raw.get(key) is None:
        return None
    return _amount(raw[key], key)


def parse_limit_rule(raw: Any) -> LimitRule:
    """Parse one entry of ``reporterLimits.rules``."""
    if not isinstance(raw, dict):
        raise ConfigurationError("limit rule must be an object")

    designation_id = _identifier(raw.get("designationId"), "designationId")
    max_allowed = _amount(raw.get("max"), "max")

    level = raw.get("level") or None
    if level is not None and level not in LEVELS:
        raise ConfigurationError(f"level must be one of {', '.join(LEVELS)}")

    pinned = [key for key in LOCATION_KEYS if raw.get(key) not in (None, "")]
    if len(pinned) > 1:
        raise ConfigurationError("a limit rule may pin at most one location")
    location_filter = None
    if pinned:
        if level is None:
            raise ConfigurationError("a location-specific rule needs a level")
        key = pinned[0]
        location_filter = (key, _identifier(raw[key], key))

    return LimitRule(
        designation_id=designation_id,
        max=max_allowed,
        level=level,
        location_filter=location_filter,
    )


def parse_reporter_limits(raw: Any, *, strict: bool = True, on_skip=None) -> ReporterLimits:
    """
    Parse the ``reporterLimits`` section.

    With ``strict=False`` every malformed part falls back on its own and
    is reported to ``on_skip(path, error)``: a bad ``defaultMax`` becomes
    ``DEFAULT_REPORTER_MAX``, a bad ``rules`` value becomes an empty list
    and a bad rule is dropped while the others are kept.  The section
    itself must still be an object.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{LIMITS_KEY} must be an object")

    def _fallback(path: str, exc: ConfigurationError) -> None:
        if strict:
            raise exc
        if on_skip is not None:
            on_skip(path, exc)

    default_max = DEFAULT_REPORTER_MAX
    if raw.get("defaultMax") is not None:
        try:
            default_max = _amount(raw["defaultMax"], "defaultMax")
        except ConfigurationError as exc:
            _fallback("defaultMax", exc)

    raw_rules = raw.get("rules") or []
    if not isinstance(raw_rules, list):
        _fallback("rules", ConfigurationError("rules must be a list"))
        raw_rules = []

    rules = []
    for index, raw_rule in enumerate(raw_rules):
        try:
            rules.append(parse_limit_rule(raw_rule))
        except ConfigurationError as exc:
            _fallback(f"rules[{index}]", ConfigurationError(f"rules[{index}]: {exc}"))

    return ReporterLimits(default_max=default_max, rules=tuple(rules))


def parse_reporter_pricing(raw: Any) -> ReporterPricing:
    """Parse the ``reporterPricing`` section."""
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{PRICING_KEY} must be an object")

    by_designation = raw.get("byDesignation") or []
    if not isinstance(by_designation, list):
        raise ConfigurationError("byDesignation must be a list")

    rows = []
    for index, row in enumerate(by_designation):
        if not isinstance(row, dict):
            raise ConfigurationError(f"byDesignation[{index}] must be an object")
        rows.append(DesignationPrice(
            designation_id=_identifier(row.get("designationId"), "designationId"),
            monthly_amount=_optional_amount(row, "monthlyAmount"),
            id_card_charge=_optional_amount(row, "idCardCharge"),
        ))

    return ReporterPricing(
        subscription_enabled=raw.get("subscriptionEnabled") is True,
        currency=str(raw.get("currency") or "INR"),
        default_monthly_amount=_optional_amount(raw, "defaultMonthlyAmount") or 0,
        default_id_card_charge=_optional_amount(raw, "defaultIdCardCharge") or 0,
        by_designation=tuple(rows),
    )
