"""
Core app service layer.

Contains cross-app read helpers that do not belong to a single domain
app.  Views in ``core.views`` stay thin and delegate here.
"""

from __future__ import annotations

import logging
from typing import Any

from django.apps import apps

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers the system-wide choice enumerations and the role list into a
    single dict for the frontend.

    This service is **stateless** — it does not depend on the requesting
    user.  All constants are public information needed by the frontend
    to render dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from reporters.models import KycStatus, ReporterLevel
        from reporters.scope import ALLOWED_CHILD_LEVELS

        Role = apps.get_model("accounts", "Role")

        to_list = SystemConstantsService._choices_to_list

        roles = list(
            Role.objects
            .order_by("-hierarchy_level")
            .values("id", "name", "hierarchy_level")
        )

        return {
            "reporter_levels": to_list(ReporterLevel),
            "kyc_statuses": to_list(KycStatus),
            "allowed_child_levels": {
                str(level): [str(child) for child in children]
                for level, children in ALLOWED_CHILD_LEVELS.items()
            },
            "role_hierarchy": roles,
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
