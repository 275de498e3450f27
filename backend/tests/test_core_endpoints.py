"""
Integration tests for core endpoints.

Scope in this file:
- GET /api/core/constants/
"""

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Role, User


class TestCoreEndpoints(TestCase):
    @classmethod
    def setUpTestData(cls):
        for name, level in (("Super Admin", 100), ("Tenant Admin", 50), ("Reporter", 10)):
            Role.objects.get_or_create(
                name=name,
                defaults={"hierarchy_level": level, "description": f"{name} role"},
            )
        cls.user = User.objects.create_user(
            username="9700000001",
            password="CoreEndpointsP@ss123",
            mobile_number="9700000001",
        )

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("core:system-constants")

    def test_constants_require_authentication(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_constants_payload(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [item["value"] for item in resp.data["reporter_levels"]],
            ["STATE", "DISTRICT", "MANDAL", "ASSEMBLY"],
        )
        self.assertIn(
            {"value": "ASSEMBLY", "label": "Assembly Constituency"},
            resp.data["reporter_levels"],
        )
        self.assertEqual(
            [item["value"] for item in resp.data["kyc_statuses"]],
            ["PENDING", "SUBMITTED", "APPROVED", "REJECTED"],
        )
        self.assertEqual(resp.data["allowed_child_levels"]["ASSEMBLY"], ["MANDAL"])
        self.assertEqual(resp.data["allowed_child_levels"]["MANDAL"], [])
        self.assertEqual(
            [role["name"] for role in resp.data["role_hierarchy"]],
            ["Super Admin", "Tenant Admin", "Reporter"],
        )
