"""
reporters.scope — who may onboard whom, geographically.

A reporter may only create reporters at a *child* level that lies
inside their own jurisdiction::

    STATE    → DISTRICT, ASSEMBLY, MANDAL   (target's state == creator's state)
    DISTRICT → ASSEMBLY, MANDAL             (target's district == creator's district)
    ASSEMBLY → MANDAL                       (mandal's district == assembly's district)
    MANDAL   → nothing

An assembly constituency is not an ancestor of a mandal; the ASSEMBLY
row above is a sibling rule (same district), not a containment rule.

``can_create`` is pure over the geography interface it is given: it
performs lookups but never writes, and an id that cannot be resolved
(unknown, malformed or soft-deleted) always denies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .models import ReporterLevel

STATE = ReporterLevel.STATE.value
DISTRICT = ReporterLevel.DISTRICT.value
MANDAL = ReporterLevel.MANDAL.value
ASSEMBLY = ReporterLevel.ASSEMBLY.value

ALLOWED_CHILD_LEVELS: dict[str, tuple[str, ...]] = {
    STATE: (DISTRICT, ASSEMBLY, MANDAL),
    DISTRICT: (ASSEMBLY, MANDAL),
    ASSEMBLY: (MANDAL,),
    MANDAL: (),
}

# Denial reasons surfaced to clients
SCOPE_MISSING = "Reporter scope missing or invalid"
CHILD_LEVEL_ONLY = "Reporter can only create child-level reporters"
STATE_SCOPE_MISSING = "Reporter state scope missing"
DISTRICT_SCOPE_MISSING = "Reporter district scope missing"
ASSEMBLY_SCOPE_MISSING = "Reporter assembly scope missing"
ASSEMBLY_SCOPE_INVALID = "Reporter assembly scope invalid"
TARGET_LOCATION_MISSING = "Target location is required"
OUTSIDE_SCOPE = {
    DISTRICT: "Target district is outside reporter scope",
    MANDAL: "Target mandal is outside reporter scope",
    ASSEMBLY: "Target assembly is outside reporter scope",
}
OUTSIDE_SCOPE_FALLBACK = "Target location is outside reporter scope"


class Geography(Protocol):
    """The slice of ``locations.services.GeographyLookup`` used here."""

    def get_district(self, district_id: Any) -> Any: ...

    def get_mandal(self, mandal_id: Any) -> Any: ...

    def get_assembly_constituency(self, assembly_id: Any) -> Any: ...

    def state_of_district(self, district_id: Any) -> Any: ...

    def state_of_mandal(self, mandal_id: Any) -> Any: ...

    def state_of_assembly(self, assembly_id: Any) -> Any: ...


@dataclass(frozen=True)
class CreatorScope:
    """A creator's own level and the location ids recorded on their row."""

    level: str | None
    state_id: Any = None
    district_id: Any = None
    mandal_id: Any = None
    assembly_constituency_id: Any = None

    @classmethod
    def of(cls, reporter) -> CreatorScope:
        return cls(
            level=reporter.level,
            state_id=reporter.state_id,
            district_id=reporter.district_id,
            mandal_id=reporter.mandal_id,
            assembly_constituency_id=reporter.assembly_constituency_id,
        )


@dataclass(frozen=True)
class ScopeDecision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = ScopeDecision(True)


def _deny(reason: str) -> ScopeDecision:
    return ScopeDecision(False, reason)


def _key(value: Any) -> str:
    """Ids compare by exact string form; ``None`` becomes ``""``."""
    return "" if value is None else str(value)


def _state_of(level: str, location_id: Any, geo: Geography) -> str:
    resolve = {
        DISTRICT: geo.state_of_district,
        MANDAL: geo.state_of_mandal,
        ASSEMBLY: geo.state_of_assembly,
    }[level]
    return _key(resolve(location_id))


def _district_of(level: str, location_id: Any, geo: Geography) -> str:
    if level == MANDAL:
        row = geo.get_mandal(location_id)
    else:
        row = geo.get_assembly_constituency(location_id)
    return _key(row.district_id) if row else ""


def can_create(
    creator: CreatorScope | None,
    requested_level: str,
    requested_location_id: Any,
    geography: Geography,
) -> ScopeDecision:
    """
    Decide whether ``creator`` may create a reporter at
    ``requested_level`` / ``requested_location_id``.

    Returns
    -------
    ScopeDecision
        ``allowed`` plus, on denial, the specific check that failed.
    """
    creator_level = _key(creator.level if creator else None)
    if creator_level not in ALLOWED_CHILD_LEVELS:
        return _deny(SCOPE_MISSING)

    requested_level = _key(requested_level)
    if requested_level not in ALLOWED_CHILD_LEVELS[creator_level]:
        return _deny(CHILD_LEVEL_ONLY)

    target = _key(requested_location_id)
    if not target:
        return _deny(TARGET_LOCATION_MISSING)

    if creator_level == STATE:
        own_state = _key(creator.state_id)
        if not own_state:
            return _deny(STATE_SCOPE_MISSING)
        if _state_of(requested_level, target, geography) != own_state:
            return _deny(OUTSIDE_SCOPE[requested_level])
        return ALLOW

    if creator_level == DISTRICT:
        own_district = _key(creator.district_id)
        if not own_district:
            return _deny(DISTRICT_SCOPE_MISSING)
        if _district_of(requested_level, target, geography) != own_district:
            return _deny(OUTSIDE_SCOPE[requested_level])
        return ALLOW

    if creator_level == ASSEMBLY:
        own_assembly = _key(creator.assembly_constituency_id)
        if not own_assembly:
            return _deny(ASSEMBLY_SCOPE_MISSING)
        assembly = geography.get_assembly_constituency(own_assembly)
        if assembly is None or not _key(assembly.district_id):
            return _deny(ASSEMBLY_SCOPE_INVALID)
        if _district_of(MANDAL, target, geography) != _key(assembly.district_id):
            return _deny(OUTSIDE_SCOPE[MANDAL])
        return ALLOW

    return _deny(OUTSIDE_SCOPE_FALLBACK)
