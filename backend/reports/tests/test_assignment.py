"""
Tests for ``AssignmentService``: self-assignment and external hand-over.
"""

from __future__ import annotations

import pytest

from accounts.models import OfficeCategory, StaffRole
from core.domain.exceptions import Conflict, InvalidState, NotFound, PermissionDenied
from core.domain.transactions import versioned_update
from reports.models import Report, ReportStatus
from reports.services import AssignmentService
from reports.state_machine import ReportState

pytestmark = pytest.mark.django_db


class TestSelfAssign:
    def test_tosm_takes_assigned_report(self, make_report, t1):
        report = make_report(status=ReportStatus.ASSIGNED)

        updated = AssignmentService.self_assign(report.pk, t1)

        assert updated.assigned_staff_id == t1.pk
        assert updated.status == ReportStatus.ASSIGNED
        assert updated.version == report.version + 1

    def test_second_self_assign_conflicts(self, make_report, t1, t2):
        report = make_report(status=ReportStatus.ASSIGNED)
        AssignmentService.self_assign(report.pk, t1)

        with pytest.raises(Conflict):
            AssignmentService.self_assign(report.pk, t2)
        with pytest.raises(Conflict):
            AssignmentService.self_assign(report.pk, t1)

        report.refresh_from_db()
        assert report.assigned_staff_id == t1.pk

    def test_stale_snapshot_loses_the_race(self, make_report, t1, t2):
        """Two TOSMs read the same unassigned report; only the first write lands."""
        report = make_report(status=ReportStatus.ASSIGNED)
        snapshot = ReportState.from_report(report)

        AssignmentService.self_assign(report.pk, t1)

        with pytest.raises(Conflict):
            versioned_update(
                model_class=Report,
                pk=snapshot.id,
                expected_version=snapshot.version,
                changes={"assigned_staff_id": t2.pk},
            )
        report.refresh_from_db()
        assert report.assigned_staff_id == t1.pk

    @pytest.mark.parametrize("status", [ReportStatus.PENDING, ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED])
    def test_requires_assigned_status(self, make_report, t1, status):
        report = make_report(status=status)
        with pytest.raises(InvalidState):
            AssignmentService.self_assign(report.pk, t1)

    def test_only_tosm(self, make_report, reviewer, em):
        report = make_report(status=ReportStatus.ASSIGNED)
        for actor in (reviewer, em):
            with pytest.raises(PermissionDenied):
                AssignmentService.self_assign(report.pk, actor)

    def test_office_must_cover_category(self, make_report, waste_tosm):
        report = make_report(status=ReportStatus.ASSIGNED, category=OfficeCategory.WATER_SUPPLY)
        with pytest.raises(PermissionDenied):
            AssignmentService.self_assign(report.pk, waste_tosm)

    def test_missing_report(self, t1):
        with pytest.raises(NotFound):
            AssignmentService.self_assign(424242, t1)


class TestAssignExternalMaintainer:
    def test_assignee_engages_maintainer(self, make_report, t1, em):
        report = make_report(status=ReportStatus.IN_PROGRESS, assigned_staff=t1)

        updated, maintainer = AssignmentService.assign_external_maintainer(report.pk, em.username, t1)

        assert maintainer.pk == em.pk
        assert updated.assigned_external_maintainer_id == em.pk
        assert updated.status == ReportStatus.IN_PROGRESS

    def test_unassigned_report_is_invalid_state(self, make_report, t1, em):
        report = make_report(status=ReportStatus.ASSIGNED)
        with pytest.raises(InvalidState):
            AssignmentService.assign_external_maintainer(report.pk, em.username, t1)

    def test_non_assignee_is_forbidden(self, make_report, t1, t2, em):
        report = make_report(status=ReportStatus.ASSIGNED, assigned_staff=t1)
        with pytest.raises(PermissionDenied):
            AssignmentService.assign_external_maintainer(report.pk, em.username, t2)

    def test_reviewer_is_forbidden(self, make_report, t1, reviewer, em):
        report = make_report(status=ReportStatus.ASSIGNED, assigned_staff=t1)
        with pytest.raises(PermissionDenied):
            AssignmentService.assign_external_maintainer(report.pk, em.username, reviewer)

    def test_closed_report_is_invalid_state(self, make_report, t1, em):
        report = make_report(status=ReportStatus.RESOLVED, assigned_staff=t1)
        with pytest.raises(InvalidState):
            AssignmentService.assign_external_maintainer(report.pk, em.username, t1)

    def test_second_maintainer_conflicts(self, make_report, create_user, create_office, t1, em):
        other = create_user(
            username="em2",
            role=StaffRole.EM,
            offices=[create_office(OfficeCategory.WATER_SUPPLY, name="Aqua Srl", is_external=True)],
        )
        report = make_report(status=ReportStatus.ASSIGNED, assigned_staff=t1, assigned_external_maintainer=em)
        with pytest.raises(Conflict):
            AssignmentService.assign_external_maintainer(report.pk, other.username, t1)

    def test_target_must_be_external_maintainer(self, make_report, t1, t2):
        report = make_report(status=ReportStatus.ASSIGNED, assigned_staff=t1)
        with pytest.raises(PermissionDenied):
            AssignmentService.assign_external_maintainer(report.pk, t2.username, t1)

    def test_maintainer_office_must_cover_category(self, make_report, create_user, create_office, t1):
        waste_em = create_user(
            username="em_waste",
            role=StaffRole.EM,
            offices=[create_office(OfficeCategory.WASTE, is_external=True)],
        )
        report = make_report(status=ReportStatus.ASSIGNED, assigned_staff=t1)
        with pytest.raises(PermissionDenied):
            AssignmentService.assign_external_maintainer(report.pk, waste_em.username, t1)

    def test_unknown_maintainer(self, make_report, t1):
        report = make_report(status=ReportStatus.ASSIGNED, assigned_staff=t1)
        with pytest.raises(NotFound):
            AssignmentService.assign_external_maintainer(report.pk, "nobody", t1)
