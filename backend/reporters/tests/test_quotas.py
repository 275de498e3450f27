"""
Unit tests for ``reporters.quotas.resolve_max`` rule precedence.
"""

from __future__ import annotations

from django.test import SimpleTestCase

from reporters.quotas import resolve_max
from tenants.config import LimitRule, ReporterLimits, parse_reporter_limits


class TestResolveMax(SimpleTestCase):

    def test_no_configuration_allows_one(self):
        self.assertEqual(resolve_max(None, "7", "MANDAL", "mandalId", "12"), 1)

    def test_empty_configuration_uses_default_max(self):
        limits = ReporterLimits(default_max=4)
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "12"), 4)

    def test_exact_rule_wins_over_wildcards(self):
        limits = ReporterLimits(default_max=1, rules=(
            LimitRule(designation_id="7", max=9),
            LimitRule(designation_id="7", level="MANDAL", max=5),
            LimitRule(designation_id="7", level="MANDAL", location_filter=("mandalId", "12"), max=2),
        ))
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "12"), 2)

    def test_level_wildcard_applies_to_other_locations(self):
        limits = ReporterLimits(rules=(
            LimitRule(designation_id="7", level="MANDAL", location_filter=("mandalId", "12"), max=2),
            LimitRule(designation_id="7", level="MANDAL", max=5),
        ))
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "13"), 5)

    def test_designation_wildcard_applies_to_any_level(self):
        limits = ReporterLimits(rules=(
            LimitRule(designation_id="7", level="DISTRICT", max=3),
            LimitRule(designation_id="7", max=6),
        ))
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "12"), 6)
        self.assertEqual(resolve_max(limits, "7", "DISTRICT", "districtId", "4"), 3)

    def test_rules_for_other_designations_are_ignored(self):
        limits = ReporterLimits(default_max=2, rules=(
            LimitRule(designation_id="8", max=10),
        ))
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "12"), 2)

    def test_first_rule_wins_within_a_rank(self):
        limits = ReporterLimits(rules=(
            LimitRule(designation_id="7", level="MANDAL", max=3),
            LimitRule(designation_id="7", level="MANDAL", max=8),
        ))
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "12"), 3)

    def test_location_key_must_match_bucket_field(self):
        limits = ReporterLimits(rules=(
            LimitRule(designation_id="7", level="MANDAL", location_filter=("districtId", "12"), max=9),
        ))
        self.assertEqual(resolve_max(limits, "7", "MANDAL", "mandalId", "12"), 1)

    def test_integer_and_string_ids_match(self):
        limits = parse_reporter_limits({
            "rules": [{"designationId": 7, "level": "MANDAL", "mandalId": 12, "max": 2}],
        })
        self.assertEqual(resolve_max(limits, 7, "MANDAL", "mandalId", 12), 2)

    def test_zero_max_is_honoured(self):
        limits = ReporterLimits(rules=(LimitRule(designation_id="7", max=0),))
        self.assertEqual(resolve_max(limits, "7", "STATE", "stateId", "1"), 0)
