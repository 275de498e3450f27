"""
Integration tests for ``POST /api/tenants/{tenant_id}/reporters/``.

Covers actor resolution, geographic scope, designation checks, quota
enforcement, identity upsert and pricing defaults.
"""

from __future__ import annotations

from unittest import mock

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.constants import MAX_MANUAL_LOGIN_DAYS
from reporters.models import Reporter, ReporterLevel
from tenants.models import TenantSettings

from .base import ReporterTestData, make_user

User = get_user_model()


class TestReporterCreate(ReporterTestData, TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.build_reporter_data()

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("reporters:reporter-list", kwargs={"tenant_id": self.tenant.pk})

    def post(self, user, payload, url=None):
        self.client.force_authenticate(user)
        return self.client.post(url or self.url, payload, format="json")

    # ── Happy path ───────────────────────────────────────────────────

    def test_tenant_admin_creates_mandal_reporter(self):
        resp = self.post(self.admin_user, self.mandal_payload())

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["full_name"], "Ravi Kumar")
        self.assertEqual(resp.data["mobile_number"], "9876543210")
        self.assertEqual(resp.data["level"], ReporterLevel.MANDAL)
        self.assertEqual(resp.data["mandal"]["name"], "Tenali")
        self.assertEqual(resp.data["designation"]["code"], "MANDAL_REPORTER")

        reporter = Reporter.objects.get(pk=resp.data["id"])
        self.assertEqual(reporter.tenant, self.tenant)
        self.assertTrue(reporter.active)

    def test_only_the_level_location_is_populated(self):
        resp = self.post(self.admin_user, self.mandal_payload(
            state_id=self.s1.pk, district_id=self.d1.pk,
        ))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        reporter = Reporter.objects.get(pk=resp.data["id"])
        self.assertEqual(reporter.mandal_id, self.m1.pk)
        self.assertIsNone(reporter.state_id)
        self.assertIsNone(reporter.district_id)
        self.assertIsNone(reporter.assembly_constituency_id)

    def test_new_user_gets_mpin_and_reporter_role(self):
        resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500001"))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        user = User.objects.get(mobile_number="9876500001")
        self.assertEqual(user.username, "9876500001")
        self.assertTrue(user.check_password("0001"))
        self.assertEqual(user.role, self.reporter_role)
        self.assertEqual(user.profile.full_name, "Ravi Kumar")

    def test_platform_user_creates_in_any_tenant(self):
        url = reverse("reporters:reporter-list", kwargs={"tenant_id": self.other_tenant.pk})
        resp = self.post(self.platform_user, self.mandal_payload(), url=url)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["tenant_id"], self.other_tenant.pk)

    def test_mobile_number_is_trimmed(self):
        resp = self.post(self.admin_user, self.mandal_payload(mobile="  9876500002 "))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertTrue(User.objects.filter(mobile_number="9876500002").exists())

    # ── Identity upsert ──────────────────────────────────────────────

    def test_same_mobile_reuses_one_identity(self):
        first = self.post(self.admin_user, self.mandal_payload(mobile="9876500003"))
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, msg=first.data)

        url = reverse("reporters:reporter-list", kwargs={"tenant_id": self.other_tenant.pk})
        second = self.post(
            self.platform_user,
            self.mandal_payload(mobile="9876500003", full_name="Ravi K."),
            url=url,
        )
        self.assertEqual(second.status_code, status.HTTP_201_CREATED, msg=second.data)

        users = User.objects.filter(mobile_number="9876500003")
        self.assertEqual(users.count(), 1)
        self.assertEqual(first.data["user_id"], second.data["user_id"])
        self.assertEqual(users.get().profile.full_name, "Ravi K.")

    def test_existing_user_role_is_corrected(self):
        existing = make_user("9876500004", self.no_perm_role, "Old Name")
        resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500004"))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        existing.refresh_from_db()
        self.assertEqual(existing.role, self.reporter_role)
        self.assertEqual(existing.profile.full_name, "Ravi Kumar")

    # ── Input validation ─────────────────────────────────────────────

    def test_missing_required_field_is_400(self):
        payload = self.mandal_payload()
        del payload["full_name"]
        resp = self.post(self.admin_user, payload)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_level_location_is_400(self):
        payload = self.mandal_payload()
        del payload["mandal_id"]
        resp = self.post(self.admin_user, payload)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["field"], "mandal_id")

    def test_short_mobile_is_400(self):
        resp = self.post(self.admin_user, self.mandal_payload(mobile="12345"))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["field"], "mobile_number")

    def test_mobile_longer_than_identity_column_is_400(self):
        resp = self.post(self.admin_user, self.mandal_payload(mobile="1234567890123456"))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["field"], "mobile_number")
        self.assertFalse(User.objects.filter(mobile_number="1234567890123456").exists())

    def test_fifteen_digit_mobile_is_accepted(self):
        resp = self.post(self.admin_user, self.mandal_payload(mobile="919876500050123"))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["mobile_number"], "919876500050123")

    def test_soft_deleted_location_is_400(self):
        self.m2.is_deleted = True
        self.m2.save()
        resp = self.post(self.admin_user, self.mandal_payload(mandal=self.m2))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Reporter.objects.filter(mandal=self.m2).exists())

    def test_designation_level_mismatch_is_400(self):
        resp = self.post(self.admin_user, self.mandal_payload(
            designation_id=self.district_designation.pk,
        ))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("does not match requested level", resp.data["detail"])

    def test_other_tenants_designation_is_400(self):
        resp = self.post(self.admin_user, self.mandal_payload(
            designation_id=self.foreign_designation.pk,
        ))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("does not belong to this tenant", resp.data["detail"])

    def test_unknown_designation_is_400(self):
        resp = self.post(self.admin_user, self.mandal_payload(designation_id=999999))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_tenant_is_404(self):
        url = reverse("reporters:reporter-list", kwargs={"tenant_id": 999999})
        resp = self.post(self.platform_user, self.mandal_payload(), url=url)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    # ── Actor resolution ─────────────────────────────────────────────

    def test_unauthenticated_is_401(self):
        resp = self.client.post(self.url, self.mandal_payload(), format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_without_creation_permission_is_403(self):
        resp = self.post(self.guest_user, self.mandal_payload())
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_tenant_admin_of_another_tenant_is_403(self):
        url = reverse("reporters:reporter-list", kwargs={"tenant_id": self.other_tenant.pk})
        resp = self.post(self.admin_user, self.mandal_payload(), url=url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Tenant scope mismatch")

    def test_creator_without_reporter_row_is_403(self):
        lonely = make_user("9100000099", self.admin_role)
        resp = self.post(lonely, self.mandal_payload())
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Reporter profile not linked to tenant")

    def test_inactive_creator_row_is_403(self):
        Reporter.objects.filter(pk=self.district_row.pk).update(active=False)
        resp = self.post(self.district_user, self.mandal_payload(subscription_active=True))
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Reporter account inactive")

    # ── Reporter creators and scope ──────────────────────────────────

    def test_district_reporter_creates_mandal_in_own_district(self):
        resp = self.post(self.district_user, self.mandal_payload(subscription_active=True))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

    def test_reporter_must_request_active_subscription(self):
        resp = self.post(self.district_user, self.mandal_payload())
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_reporter_with_inactive_subscription_is_403(self):
        Reporter.objects.filter(pk=self.district_row.pk).update(subscription_active=False)
        resp = self.post(self.district_user, self.mandal_payload(subscription_active=True))
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Subscription must be active to create reporters")

    def test_district_reporter_outside_district_is_403(self):
        resp = self.post(self.district_user, self.mandal_payload(
            mandal=self.m3, subscription_active=True,
        ))
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Target mandal is outside reporter scope")

    def test_district_reporter_cannot_create_peer(self):
        resp = self.post(self.district_user, {
            "designation_id": self.district_designation.pk,
            "level": ReporterLevel.DISTRICT.value,
            "district_id": self.d2.pk,
            "full_name": "Peer",
            "mobile_number": "9876500005",
            "subscription_active": True,
        })
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Reporter can only create child-level reporters")

    def test_state_reporter_cannot_cross_state(self):
        state_user = make_user("9100000010", self.reporter_role)
        Reporter.objects.create(
            tenant=self.tenant, user=state_user, designation=self.state_designation,
            level=ReporterLevel.STATE, state=self.s1, subscription_active=True,
        )
        resp = self.post(state_user, {
            "designation_id": self.district_designation.pk,
            "level": ReporterLevel.DISTRICT.value,
            "district_id": self.d3.pk,
            "full_name": "Cross State",
            "mobile_number": "9876500006",
            "subscription_active": True,
        })
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "Target district is outside reporter scope")
        self.assertFalse(User.objects.filter(mobile_number="9876500006").exists())

    def test_assembly_reporter_creates_mandal_in_same_district(self):
        assembly_user = make_user("9100000011", self.reporter_role)
        Reporter.objects.create(
            tenant=self.tenant, user=assembly_user, designation=self.assembly_designation,
            level=ReporterLevel.ASSEMBLY, assembly_constituency=self.a1, subscription_active=True,
        )
        ok = self.post(assembly_user, self.mandal_payload(mandal=self.m2, subscription_active=True))
        self.assertEqual(ok.status_code, status.HTTP_201_CREATED, msg=ok.data)

        denied = self.post(assembly_user, self.mandal_payload(
            mobile="9876500007", mandal=self.m3, subscription_active=True,
        ))
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)

    # ── Quotas ───────────────────────────────────────────────────────

    def test_default_quota_is_one_per_bucket(self):
        first = self.post(self.admin_user, self.mandal_payload(mobile="9876500010"))
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, msg=first.data)

        second = self.post(self.admin_user, self.mandal_payload(mobile="9876500011"))
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data["current"], 1)
        self.assertEqual(second.data["maxAllowed"], 1)

        # A different mandal is a different bucket.
        third = self.post(self.admin_user, self.mandal_payload(mobile="9876500011", mandal=self.m2))
        self.assertEqual(third.status_code, status.HTTP_201_CREATED, msg=third.data)

    def test_location_rule_allows_two_then_blocks(self):
        self.set_limits({
            "defaultMax": 1,
            "rules": [{
                "designationId": str(self.mandal_designation.pk),
                "level": "MANDAL",
                "mandalId": str(self.m1.pk),
                "max": 2,
            }],
        })
        for mobile in ("9876500020", "9876500021"):
            resp = self.post(self.admin_user, self.mandal_payload(mobile=mobile))
            self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500022"))
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["detail"], "Reporter limit reached")
        self.assertEqual(resp.data["current"], 2)
        self.assertEqual(resp.data["maxAllowed"], 2)
        self.assertEqual(resp.data["designationId"], str(self.mandal_designation.pk))
        self.assertEqual(resp.data["level"], "MANDAL")
        self.assertEqual(resp.data["mandalId"], str(self.m1.pk))
        self.assertFalse(User.objects.filter(mobile_number="9876500022").exists())

    def test_malformed_default_max_keeps_valid_rules(self):
        self.set_limits({
            "defaultMax": "3",
            "rules": [{
                "designationId": str(self.mandal_designation.pk),
                "level": "MANDAL",
                "max": 2,
            }],
        })
        for mobile in ("9876500025", "9876500026"):
            resp = self.post(self.admin_user, self.mandal_payload(mobile=mobile))
            self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500027"))
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["maxAllowed"], 2)

    def test_deactivated_reporters_free_their_slot(self):
        first = self.post(self.admin_user, self.mandal_payload(mobile="9876500030"))
        Reporter.objects.filter(pk=first.data["id"]).update(active=False)

        resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500031"))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

    def test_quota_exceeded_writes_nothing(self):
        before = Reporter.objects.count()
        with mock.patch(
            "reporters.services.ReporterStore.count_active_reporters", return_value=5,
        ), mock.patch("reporters.services.ReporterStore.insert_reporter") as insert:
            resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500040"))

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        insert.assert_not_called()
        self.assertEqual(Reporter.objects.count(), before)
        self.assertFalse(User.objects.filter(mobile_number="9876500040").exists())

    def test_persistent_serialization_failure_is_reported(self):
        with mock.patch(
            "reporters.services.ReporterStore.insert_reporter",
            side_effect=OperationalError("could not serialize access due to concurrent update"),
        ):
            resp = self.post(self.admin_user, self.mandal_payload(mobile="9876500041"))

        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertFalse(User.objects.filter(mobile_number="9876500041").exists())

    # ── Pricing ──────────────────────────────────────────────────────

    def _enable_pricing(self):
        TenantSettings.objects.filter(tenant=self.tenant).update(data={
            "reporterPricing": {
                "subscriptionEnabled": True,
                "defaultMonthlyAmount": 9900,
                "defaultIdCardCharge": 4900,
                "byDesignation": [
                    {"designationId": str(self.mandal_designation.pk), "monthlyAmount": 5000},
                ],
            },
        })

    def test_pricing_defaults_come_from_tenant_settings(self):
        self._enable_pricing()
        resp = self.post(self.admin_user, self.mandal_payload())
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertTrue(resp.data["subscription_active"])
        self.assertEqual(resp.data["monthly_subscription_amount"], 5000)
        self.assertEqual(resp.data["id_card_charge"], 4900)

    def test_inactive_subscription_has_zero_monthly_amount(self):
        self._enable_pricing()
        resp = self.post(self.admin_user, self.mandal_payload(
            subscription_active=False, monthly_subscription_amount=1200,
        ))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertFalse(resp.data["subscription_active"])
        self.assertEqual(resp.data["monthly_subscription_amount"], 0)
        self.assertEqual(resp.data["id_card_charge"], 4900)

    def test_without_pricing_subscription_is_off(self):
        resp = self.post(self.admin_user, self.mandal_payload())
        self.assertFalse(resp.data["subscription_active"])
        self.assertEqual(resp.data["monthly_subscription_amount"], 0)
        self.assertEqual(resp.data["id_card_charge"], 0)

    def test_manual_login_window(self):
        resp = self.post(self.admin_user, self.mandal_payload(
            manual_login_enabled=True, manual_login_days=30,
        ))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertTrue(resp.data["manual_login_enabled"])
        self.assertEqual(resp.data["manual_login_days"], 30)
        self.assertIsNotNone(resp.data["manual_login_expires_at"])

    def test_manual_login_days_beyond_limit_is_400(self):
        resp = self.post(self.admin_user, self.mandal_payload(
            manual_login_enabled=True, manual_login_days=999999999,
        ))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("manual_login_days", resp.data)
        self.assertFalse(Reporter.objects.filter(tenant=self.tenant, mandal=self.m1).exists())

    def test_manual_login_days_at_limit_is_accepted(self):
        resp = self.post(self.admin_user, self.mandal_payload(
            manual_login_enabled=True, manual_login_days=MAX_MANUAL_LOGIN_DAYS,
        ))
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["manual_login_days"], MAX_MANUAL_LOGIN_DAYS)
