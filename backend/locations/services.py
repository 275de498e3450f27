"""
Locations Service Layer.

- ``GeographyLookup``        — parent resolution used by the reporter
                               scope rules (ancestor-chain checks).
- ``LocationQueryService``   — filtered listings behind the read-only
                               location endpoints.

Soft-deleted rows behave exactly like missing rows everywhere in this
module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.db.models import QuerySet

from .models import AssemblyConstituency, District, Mandal, State


@dataclass(frozen=True)
class DistrictRef:
    id: Any
    state_id: Any


@dataclass(frozen=True)
class MandalRef:
    id: Any
    district_id: Any


@dataclass(frozen=True)
class AssemblyRef:
    id: Any
    district_id: Any


def _live_row(model, pk: Any, *fields: str) -> dict | None:
    if pk in (None, ""):
        return None
    try:
        return model.objects.live().filter(pk=pk).values("id", *fields).first()
    except (ValueError, TypeError):
        # non-numeric id coming straight from a request body
        return None


class GeographyLookup:
    """
    Read-only view of the location tree.

    Every getter returns ``None`` for an unknown, malformed or
    soft-deleted id so that callers can treat "unresolvable" uniformly.
    """

    def get_district(self, district_id: Any) -> DistrictRef | None:
        row = _live_row(District, district_id, "state_id")
        return DistrictRef(row["id"], row["state_id"]) if row else None

    def get_mandal(self, mandal_id: Any) -> MandalRef | None:
        row = _live_row(Mandal, mandal_id, "district_id")
        return MandalRef(row["id"], row["district_id"]) if row else None

    def get_assembly_constituency(self, assembly_id: Any) -> AssemblyRef | None:
        row = _live_row(AssemblyConstituency, assembly_id, "district_id")
        return AssemblyRef(row["id"], row["district_id"]) if row else None

    def state_exists(self, state_id: Any) -> bool:
        return _live_row(State, state_id) is not None

    def state_of_district(self, district_id: Any) -> Any | None:
        district = self.get_district(district_id)
        return district.state_id if district else None

    def state_of_mandal(self, mandal_id: Any) -> Any | None:
        """Resolve mandal → district → state; ``None`` if any hop is missing."""
        mandal = self.get_mandal(mandal_id)
        return self.state_of_district(mandal.district_id) if mandal else None

    def state_of_assembly(self, assembly_id: Any) -> Any | None:
        """Resolve assembly → district → state; ``None`` if any hop is missing."""
        assembly = self.get_assembly_constituency(assembly_id)
        return self.state_of_district(assembly.district_id) if assembly else None


class LocationQueryService:

    @staticmethod
    def list_states() -> QuerySet[State]:
        return State.objects.live()

    @staticmethod
    def list_districts(*, state_id: Any = None) -> QuerySet[District]:
        qs = District.objects.live().filter(state__is_deleted=False)
        if state_id is not None:
            qs = qs.filter(state_id=state_id)
        return qs

    @staticmethod
    def list_mandals(*, district_id: Any = None) -> QuerySet[Mandal]:
        qs = Mandal.objects.live().filter(district__is_deleted=False)
        if district_id is not None:
            qs = qs.filter(district_id=district_id)
        return qs

    @staticmethod
    def list_assembly_constituencies(*, district_id: Any = None) -> QuerySet[AssemblyConstituency]:
        qs = AssemblyConstituency.objects.live().filter(district__is_deleted=False)
        if district_id is not None:
            qs = qs.filter(district_id=district_id)
        return qs
