"""
Core app serializers.

Response-only serializers for the cross-app endpoints in ``core.views``.
They exist mainly so ``drf-spectacular`` can document the payloads.
"""

from __future__ import annotations

from rest_framework import serializers


class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "DISTRICT", "label": "District"}
    """

    value = serializers.CharField(
        help_text="Machine-readable value to send in API requests.",
    )
    label = serializers.CharField(
        help_text="Human-readable display label for the UI.",
    )


class RoleHierarchyItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(help_text="Role PK.")
    name = serializers.CharField(help_text="Role display name.")
    hierarchy_level = serializers.IntegerField(
        help_text="Authority level (higher = more authority).",
    )


class SystemConstantsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/constants/``.

    Response shape::

        {
            "reporter_levels": [{"value": "STATE", "label": "State"}, ...],
            "kyc_statuses": [...],
            "allowed_child_levels": {"STATE": ["DISTRICT", ...], ...},
            "role_hierarchy": [
                {"id": 1, "name": "Super Admin", "hierarchy_level": 100},
                ...
            ]
        }
    """

    reporter_levels = ChoiceItemSerializer(
        many=True,
        help_text="Geographic levels a reporter can be assigned to.",
    )
    kyc_statuses = ChoiceItemSerializer(
        many=True,
        help_text="Reporter KYC workflow statuses.",
    )
    allowed_child_levels = serializers.DictField(
        child=serializers.ListField(child=serializers.CharField()),
        help_text="For each creator level, the levels it may create.",
    )
    role_hierarchy = RoleHierarchyItemSerializer(
        many=True,
        help_text="All roles with their hierarchy levels, ordered by authority.",
    )
