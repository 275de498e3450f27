"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``auth_header`` fixture for authenticated requests (JWT).
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            user = create_user(mobile_number="9876543210")
    """
    from accounts.models import User

    _counter = 0

    def _factory(
        *,
        mobile_number: str | None = None,
        username: str | None = None,
        password: str = "TestPass123!",
        role=None,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if mobile_number is None:
            mobile_number = f"90000{_counter:05d}"
        if username is None:
            username = mobile_number

        return User.objects.create_user(
            username=username,
            password=password,
            mobile_number=mobile_number,
            role=role,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper function that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header()
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/constants/")
            assert resp.status_code != 401
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(*, role=None, **user_kwargs) -> dict[str, str]:
        user = create_user(role=role, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
