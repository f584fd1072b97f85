"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_office`` factory fixture for municipal offices.
  - ``create_user`` factory fixture for citizens and staff members.
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
def create_office(db):
    """
    Factory fixture that creates (or reuses) an office for a category.

    Usage::

        office = create_office("Public Lighting")
    """
    from accounts.models import Office

    def _factory(category: str, *, name: str | None = None, is_external: bool = False) -> Office:
        office, _ = Office.objects.get_or_create(
            name=name or f"{category} {'Contractor' if is_external else 'Office'}",
            defaults={"category": category, "is_external": is_external},
        )
        return office

    return _factory


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Citizens are the default; passing ``role`` creates a staff member.
    ``offices`` is a list of ``Office`` instances to affiliate with.

    Usage::

        def test_something(create_user, create_office):
            citizen = create_user(username="alice")
            tosm = create_user(
                username="bob",
                role=StaffRole.TOSM,
                offices=[create_office("Public Lighting")],
            )
    """
    from accounts.models import User, UserKind

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        role: str = "",
        offices=(),
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"

        user = User.objects.create_user(
            username=username,
            password=password,
            email=email,
            kind=UserKind.STAFF if role else UserKind.CITIZEN,
            role=role,
            is_active=is_active,
            **kwargs,
        )
        if offices:
            user.offices.set(offices)
        return user

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper that creates a user and returns an ``Authorization``
    header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(username="alice")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/accounts/me/")
            assert resp.status_code == 200
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(*, username: str | None = None, role: str = "", **user_kwargs) -> dict[str, str]:
        user = create_user(username=username, role=role, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
