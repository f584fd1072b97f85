"""
Smoke tests — verify that Django boots, URL routing resolves, and
the core domain modules behave as the service layers expect.

No data is needed; these tests just prove the plumbing works.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from django.urls import resolve, reverse

from accounts.models import StaffRole


# ════════════════════════════════════════════════════════════════════
#  URL Routing Smoke Tests
# ════════════════════════════════════════════════════════════════════

class TestURLRouting:
    """Ensure all app URL names resolve to the expected paths."""

    EXPECTED_URLS = [
        # (url_name, kwargs, expected_path)
        ("report-list", {}, "/api/reports/"),
        ("report-map", {}, "/api/reports/map/"),
        ("report-detail", {"pk": 1}, "/api/reports/1/"),
        ("report-review", {"pk": 1}, "/api/reports/1/review/"),
        ("report-update-status", {"pk": 1}, "/api/reports/1/status/"),
        ("report-assign-self", {"pk": 1}, "/api/reports/1/assign-self/"),
        ("report-assign-external", {"pk": 1}, "/api/reports/1/assign-external/"),
        ("report-message-list", {"report_pk": 1}, "/api/reports/1/messages/"),
        ("core:notification-list", {}, "/api/core/notifications/"),
        ("core:notification-mark-as-read", {"pk": 1}, "/api/core/notifications/1/read/"),
        ("accounts:login", {}, "/api/accounts/auth/login/"),
        ("accounts:token-refresh", {}, "/api/accounts/auth/token/refresh/"),
        ("accounts:me", {}, "/api/accounts/me/"),
        ("accounts:staff-external", {}, "/api/accounts/staff/external/"),
        ("schema", {}, "/api/schema/"),
    ]

    @pytest.mark.parametrize("url_name,kwargs,expected", EXPECTED_URLS)
    def test_url_reverses(self, url_name: str, kwargs: dict, expected: str):
        assert reverse(url_name, kwargs=kwargs) == expected

    @pytest.mark.parametrize("url_name,kwargs,expected", EXPECTED_URLS)
    def test_path_resolves_to_view(self, url_name: str, kwargs: dict, expected: str):
        match = resolve(expected)
        assert match.func is not None


# ════════════════════════════════════════════════════════════════════
#  Exception Behaviour Tests
# ════════════════════════════════════════════════════════════════════

class TestDomainExceptions:
    def test_hierarchy(self):
        from core.domain.exceptions import (
            Conflict,
            DomainError,
            InvalidComment,
            InvalidState,
            InvalidTransition,
            MissingComment,
            NotFound,
            PermissionDenied,
            ValidationError,
        )
        assert issubclass(InvalidTransition, Conflict)
        assert issubclass(InvalidState, Conflict)
        assert issubclass(Conflict, DomainError)
        assert issubclass(MissingComment, ValidationError)
        assert issubclass(InvalidComment, ValidationError)
        assert issubclass(PermissionDenied, DomainError)
        assert issubclass(NotFound, DomainError)

    def test_codes(self):
        from core.domain.exceptions import InvalidTransition, PermissionDenied
        assert PermissionDenied().code == "forbidden"
        assert InvalidTransition(current="Pending", target="Resolved").code == "invalid_transition"

    def test_invalid_transition_structured(self):
        from core.domain.exceptions import InvalidTransition
        err = InvalidTransition(current="Pending", target="Resolved", reason="not reviewed")
        assert str(err) == "Invalid state transition from 'Pending' to 'Resolved' (not reviewed)."
        assert err.current == "Pending"
        assert err.target == "Resolved"

    def test_invalid_transition_plain_message(self):
        from core.domain.exceptions import InvalidTransition
        err = InvalidTransition("Report is closed.")
        assert str(err) == "Report is closed."


class TestExceptionHandler:
    @pytest.mark.parametrize(
        "exc_name, status_code, code",
        [
            ("ValidationError", 400, "validation_error"),
            ("MissingComment", 400, "missing_comment"),
            ("PermissionDenied", 403, "forbidden"),
            ("NotFound", 404, "not_found"),
            ("Conflict", 409, "conflict"),
            ("InvalidState", 409, "invalid_state"),
        ],
    )
    def test_maps_domain_errors(self, exc_name, status_code, code):
        from core.domain import exceptions
        from core.domain.exception_handler import domain_exception_handler

        response = domain_exception_handler(getattr(exceptions, exc_name)("boom"), {"view": None})

        assert response.status_code == status_code
        assert response.data == {"detail": "boom", "code": code}

    def test_invalid_transition_reports_endpoints(self):
        from core.domain.exception_handler import domain_exception_handler
        from core.domain.exceptions import InvalidTransition

        exc = InvalidTransition(current="Pending", target="Resolved")
        response = domain_exception_handler(exc, {"view": None})

        assert response.status_code == 409
        assert response.data["code"] == "invalid_transition"
        assert (response.data["current"], response.data["target"]) == ("Pending", "Resolved")

    def test_unrelated_exception_is_left_alone(self):
        from core.domain.exception_handler import domain_exception_handler
        assert domain_exception_handler(RuntimeError("boom"), {}) is None


# ════════════════════════════════════════════════════════════════════
#  Access Helper Unit Tests
# ════════════════════════════════════════════════════════════════════

def _user(kind: str, role: str = "") -> SimpleNamespace:
    return SimpleNamespace(
        is_authenticated=True,
        is_citizen=kind == "citizen",
        is_staff_member=kind == "staff",
        role=role,
        username="someone",
    )


class TestAccessHelpers:
    def test_require_role_accepts_listed_role(self):
        from core.domain.access import require_role
        require_role(_user("staff", StaffRole.TOSM), StaffRole.TOSM, StaffRole.EM)

    def test_require_role_raises(self):
        from core.domain.access import require_role
        from core.domain.exceptions import PermissionDenied

        with pytest.raises(PermissionDenied):
            require_role(_user("staff", StaffRole.MPRO), StaffRole.TOSM)
        with pytest.raises(PermissionDenied):
            require_role(_user("citizen"), StaffRole.TOSM)

    def test_require_citizen(self):
        from core.domain.access import require_citizen
        from core.domain.exceptions import PermissionDenied

        require_citizen(_user("citizen"))
        with pytest.raises(PermissionDenied, match="Only citizens"):
            require_citizen(_user("staff", StaffRole.ADMIN))

    def test_get_user_role_name(self):
        from core.domain.access import get_user_role_name

        assert get_user_role_name(_user("citizen")) == "citizen"
        assert get_user_role_name(_user("staff", StaffRole.EM)) == "em"
        assert get_user_role_name(SimpleNamespace(is_authenticated=False)) is None
