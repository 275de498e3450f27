"""
Locations app models.

Administrative geography as two strict trees sharing a root::

    State ─▶ District ─▶ Mandal
                     └─▶ AssemblyConstituency

Rows are never hard-deleted; ``is_deleted`` hides them from lookups and
listings while keeping reporter rows that point at them intact.
"""

from django.db import models

from core.models import TimeStampedModel


class LocationQuerySet(models.QuerySet):
    def live(self):
        return self.filter(is_deleted=False)


class Location(TimeStampedModel):
    """Abstract base for every node of the geography tree."""

    name = models.CharField(max_length=255, verbose_name="Name")
    is_deleted = models.BooleanField(default=False, verbose_name="Deleted")

    objects = LocationQuerySet.as_manager()

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name


class State(Location):
    code = models.CharField(max_length=10, blank=True, default="", verbose_name="Code")

    class Meta(Location.Meta):
        verbose_name = "State"
        verbose_name_plural = "States"


class District(Location):
    state = models.ForeignKey(
        State,
        on_delete=models.PROTECT,
        related_name="districts",
        verbose_name="State",
    )

    class Meta(Location.Meta):
        verbose_name = "District"
        verbose_name_plural = "Districts"


class Mandal(Location):
    district = models.ForeignKey(
        District,
        on_delete=models.PROTECT,
        related_name="mandals",
        verbose_name="District",
    )

    class Meta(Location.Meta):
        verbose_name = "Mandal"
        verbose_name_plural = "Mandals"


class AssemblyConstituency(Location):
    district = models.ForeignKey(
        District,
        on_delete=models.PROTECT,
        related_name="assembly_constituencies",
        verbose_name="District",
    )

    class Meta(Location.Meta):
        verbose_name = "Assembly Constituency"
        verbose_name_plural = "Assembly Constituencies"
