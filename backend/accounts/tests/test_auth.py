"""
Accounts app tests — multi-field login.

Covers:
  1. Login with username, mobile number and email
  2. Token claims carry the role and its permissions
  3. Wrong password and inactive users are rejected
  4. A provisioned reporter logs in with the mobile number and MPIN
"""

from __future__ import annotations

import pytest
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import Role
from accounts.services import IdentityService

LOGIN_URL = "/api/accounts/auth/login/"
ME_URL = "/api/accounts/me/"
PASSWORD = "TestPass123!"


@pytest.fixture()
def editor_role(db):
    role, _ = Role.objects.get_or_create(
        name="Tenant Editor",
        defaults={"hierarchy_level": 30, "description": "Desk editor"},
    )
    return role


@pytest.fixture()
def editor(create_user, editor_role):
    return create_user(
        mobile_number="9500000001",
        username="desk_editor",
        email="desk@example.com",
        role=editor_role,
    )


def _login(api_client, identifier: str, password: str = PASSWORD):
    return api_client.post(
        LOGIN_URL, {"identifier": identifier, "password": password}, format="json",
    )


@pytest.mark.django_db
@pytest.mark.parametrize("identifier", ["desk_editor", "9500000001", "desk@example.com", " 9500000001 "])
def test_login_with_any_identifier(api_client, editor, identifier):
    resp = _login(api_client, identifier)

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["access"]
    assert resp.data["refresh"]
    assert resp.data["user"]["id"] == editor.pk
    assert resp.data["user"]["mobile_number"] == "9500000001"
    assert resp.data["user"]["role_detail"]["name"] == "Tenant Editor"


@pytest.mark.django_db
def test_token_carries_role_claims(api_client, editor):
    resp = _login(api_client, "desk_editor")

    token = AccessToken(resp.data["access"])
    assert token["role"] == "Tenant Editor"
    assert token["hierarchy_level"] == 30
    assert token["permissions_list"] == []


@pytest.mark.django_db
def test_wrong_password_is_rejected(api_client, editor):
    resp = _login(api_client, "desk_editor", "nope")
    assert resp.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
def test_inactive_user_cannot_log_in(api_client, create_user):
    create_user(mobile_number="9500000002", is_active=False)
    resp = _login(api_client, "9500000002")
    assert resp.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
def test_provisioned_reporter_logs_in_with_mpin(api_client):
    role = IdentityService.get_reporter_role()
    IdentityService.upsert_user("9876501234", role=role, full_name="Ravi Kumar")

    resp = _login(api_client, "9876501234", "1234")

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["user"]["full_name"] == "Ravi Kumar"
    assert resp.data["user"]["preferred_language"] == "te"


@pytest.mark.django_db
def test_jwt_grants_access_to_me(api_client, auth_header):
    header = auth_header(mobile_number="9500000003")
    api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])

    resp = api_client.get(ME_URL)

    assert resp.status_code == status.HTTP_200_OK
    assert resp.data["mobile_number"] == "9500000003"
