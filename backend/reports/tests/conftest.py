"""
Fixtures shared by the reports service tests.

Cast: one citizen, one reviewer (MPRO), two technical staff members of the
Water Supply office, one technical staff member of the Waste office, and an
external maintainer covering Water Supply.
"""

from __future__ import annotations

import pytest

from accounts.models import OfficeCategory, StaffRole
from reports.models import Report, ReportStatus


@pytest.fixture()
def water_office(create_office):
    return create_office(OfficeCategory.WATER_SUPPLY)


@pytest.fixture()
def citizen(create_user):
    return create_user(username="carla")


@pytest.fixture()
def reviewer(create_user, create_office):
    return create_user(
        username="pr_officer",
        role=StaffRole.MPRO,
        offices=[create_office(OfficeCategory.MUNICIPAL_ORGANIZATION)],
    )


@pytest.fixture()
def t1(create_user, water_office):
    return create_user(username="t1", role=StaffRole.TOSM, offices=[water_office])


@pytest.fixture()
def t2(create_user, water_office):
    return create_user(username="t2", role=StaffRole.TOSM, offices=[water_office])


@pytest.fixture()
def waste_tosm(create_user, create_office):
    return create_user(username="waste_t", role=StaffRole.TOSM, offices=[create_office(OfficeCategory.WASTE)])


@pytest.fixture()
def em(create_user, create_office):
    contractor = create_office(OfficeCategory.WATER_SUPPLY, name="Hydro Contractors", is_external=True)
    return create_user(username="em1", role=StaffRole.EM, offices=[contractor])


@pytest.fixture()
def make_report(citizen):
    """Create a report directly in the requested workflow position."""

    def _make(
        *,
        status: str = ReportStatus.PENDING,
        category: str = OfficeCategory.WATER_SUPPLY,
        assigned_staff=None,
        assigned_external_maintainer=None,
        owner=None,
        **kwargs,
    ) -> Report:
        defaults = {
            "title": "Broken water main",
            "description": "Water is leaking onto the street.",
            "latitude": 45.0703,
            "longitude": 7.6869,
            "photo1": "reports/leak-1.jpg",
        }
        defaults.update(kwargs)
        return Report.objects.create(
            citizen=owner or citizen,
            status=status,
            category=category,
            assigned_staff=assigned_staff,
            assigned_external_maintainer=assigned_external_maintainer,
            **defaults,
        )

    return _make
