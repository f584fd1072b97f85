"""
Reports app Service Layer.

This module is the **single source of truth** for all business logic
in the ``reports`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``ReportQueryService``     — Report lookup, staff listing, public map.
- ``AssignmentService``      — Self-assignment (TOSM) and hand-over to an
                               external maintainer (EM).
- ``MessagingService``       — Append-only report thread with per-message
                               visibility and per-requester projection.
- ``ReportWorkflowService``  — The operations an API caller invokes:
                               creation, reviewer / worker status updates,
                               assignment, messaging, notification reads.

Concurrency
-----------
Status and assignment writes go through ``versioned_update``: the service
takes a ``ReportState`` snapshot, computes the new snapshot, and commits it
only if the report's ``version`` is unchanged.  A writer that lost the race
gets ``Conflict``.  Message appends serialise on a row lock of the owning
report so that every message gets a unique, increasing ``sequence``.

Notifications are dispatched after the primary write commits and never
fail the operation; undelivered notifications surface as
``WorkflowResult.warnings``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from django.db import transaction
from django.db.models import Max, QuerySet

from accounts.models import Citizen, OfficeCategory, Staff, StaffRole, UserKind
from core.domain.access import require_role
from core.domain.exceptions import (
    Conflict,
    InvalidState,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from core.domain.notifications import NotificationDispatcher
from core.domain.transactions import lock_for_update, versioned_update

from .models import Message, Report, ReportStatus
from .policy import Actor
from .state_machine import ReportState, apply_transition

logger = logging.getLogger(__name__)

#: Maximum number of photo references stored per report.
MAX_PHOTOS: int = 3

_ACTIVE_WORKER_STATUSES = frozenset({
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.SUSPENDED,
})


@dataclass
class WorkflowResult:
    """Primary result of a workflow operation plus dispatch warnings."""

    report: Report
    warnings: list[str] = field(default_factory=list)
    message: Message | None = None


def _commit(previous: ReportState, updated: ReportState) -> Report:
    """Persist ``updated`` if the report still matches ``previous``."""
    return versioned_update(
        model_class=Report,
        pk=previous.id,
        expected_version=previous.version,
        changes=updated.changes_since(previous),
    )


def _resolve_staff(username: str) -> Staff:
    staff = Staff.objects.filter(username=username, is_active=True).first()
    if staff is None:
        raise NotFound(f"Staff with username '{username}' not found.")
    return staff


def _resolve_citizen(username: str) -> Citizen:
    citizen = Citizen.objects.filter(username=username, is_active=True).first()
    if citizen is None:
        raise NotFound(f"Citizen with username '{username}' not found.")
    return citizen


def _collect(*warnings: str | None) -> list[str]:
    return [w for w in warnings if w]


# ═══════════════════════════════════════════════════════════════════
#  Report Query Service
# ═══════════════════════════════════════════════════════════════════


class ReportQueryService:
    """Read-side helpers; nothing here mutates a report."""

    @staticmethod
    def get_report(pk: int) -> Report:
        try:
            return Report.objects.select_related(
                "citizen", "assigned_staff", "assigned_external_maintainer",
            ).get(pk=pk)
        except Report.DoesNotExist:
            raise NotFound(f"Report with id {pk} not found.")

    @staticmethod
    def get_filtered_queryset(
        requesting_user: Any,
        filters: dict[str, Any],
    ) -> QuerySet[Report]:
        """
        Build an office-scoped, filtered queryset of reports for staff.

        Supported ``filters`` keys: ``citizen_username``, ``status``,
        ``title``, ``category``, ``staff_username``, ``from_date``,
        ``to_date`` (both dates inclusive).

        Technical staff and external maintainers only see reports whose
        category is covered by one of their offices.
        """
        if requesting_user is None or not requesting_user.is_staff_member:
            raise PermissionDenied("Only staff members can list reports.")

        qs = Report.objects.select_related(
            "citizen", "assigned_staff", "assigned_external_maintainer",
        )

        if requesting_user.role in (StaffRole.TOSM, StaffRole.EM):
            qs = qs.filter(category__in=requesting_user.office_categories)

        if "citizen_username" in filters:
            qs = qs.filter(citizen__username=filters["citizen_username"])
        if "status" in filters:
            qs = qs.filter(status=filters["status"])
        if "title" in filters:
            qs = qs.filter(title=filters["title"])
        if "category" in filters:
            qs = qs.filter(category=filters["category"])
        if "staff_username" in filters:
            qs = qs.filter(assigned_staff__username=filters["staff_username"])
        if "from_date" in filters:
            qs = qs.filter(created_at__date__gte=filters["from_date"])
        if "to_date" in filters:
            qs = qs.filter(created_at__date__lte=filters["to_date"])

        return qs.order_by("created_at", "id")

    @staticmethod
    def get_map_queryset() -> QuerySet[Report]:
        """Reports approved for public display (neither pending nor rejected)."""
        return (
            Report.objects
            .exclude(status__in=[ReportStatus.PENDING, ReportStatus.REJECTED])
            .select_related("citizen", "assigned_staff", "assigned_external_maintainer")
            .order_by("created_at", "id")
        )


# ═══════════════════════════════════════════════════════════════════
#  Assignment Service
# ═══════════════════════════════════════════════════════════════════


class AssignmentService:
    """
    Two-tier assignment layered on top of the state machine.

    Assignment never changes ``status``; it only sets the fields the
    role policy consults to authorise worker transitions.
    """

    @staticmethod
    def self_assign(report_id: int, actor: Staff) -> Report:
        """
        A technical staff member takes charge of an ``Assigned`` report.

        Raises
        ------
        PermissionDenied
            Actor is not a TOSM, or none of their offices covers the
            report's category.
        InvalidState
            The report is not in ``Assigned`` status.
        Conflict
            The report already has an assigned staff member, or another
            staff member assigned themselves concurrently.
        """
        require_role(actor, StaffRole.TOSM, message="Only technical staff can self-assign reports.")

        state = ReportState.from_report(ReportQueryService.get_report(report_id))

        if state.status != ReportStatus.ASSIGNED:
            raise InvalidState(
                f"Only reports in '{ReportStatus.ASSIGNED}' status can be self-assigned "
                f"(report {report_id} is '{state.status}')."
            )
        if state.assigned_staff_id is not None:
            raise Conflict(f"Report {report_id} is already assigned to a staff member.")
        if not actor.covers_category(state.category):
            raise PermissionDenied(
                f"Staff '{actor.username}' cannot be assigned to reports of "
                f"category '{state.category}'."
            )

        report = _commit(state, state.evolve(assigned_staff_id=actor.pk))
        logger.info("Report %s self-assigned by staff=%s", report_id, actor.username)
        return report

    @staticmethod
    def assign_external_maintainer(report_id: int, em_username: str, actor: Staff) -> tuple[Report, Staff]:
        """
        The assigned technical staff member hands the report to an
        external maintainer.

        Raises
        ------
        PermissionDenied
            Actor is not the report's assigned TOSM, the target is not an
            external maintainer, or the maintainer's offices do not cover
            the report's category.
        InvalidState
            No staff member is assigned yet, or the report is not in an
            active worker status.
        Conflict
            An external maintainer is already assigned (or was assigned
            concurrently).
        NotFound
            No staff member named ``em_username`` exists.
        """
        require_role(actor, StaffRole.TOSM, message="Only technical staff can engage an external maintainer.")

        state = ReportState.from_report(ReportQueryService.get_report(report_id))

        if state.assigned_staff_id is None:
            raise InvalidState(f"Report {report_id} has no assigned staff member yet.")
        if state.assigned_staff_id != actor.pk:
            raise PermissionDenied("This report is not assigned to you.")
        if state.status not in _ACTIVE_WORKER_STATUSES:
            raise InvalidState(f"Cannot engage an external maintainer on a '{state.status}' report.")
        if state.assigned_external_maintainer_id is not None:
            raise Conflict(f"Report {report_id} already has an external maintainer.")

        maintainer = _resolve_staff(em_username)
        if maintainer.role != StaffRole.EM:
            raise PermissionDenied(f"Staff '{em_username}' is not an external maintainer.")
        if not maintainer.covers_category(state.category):
            raise PermissionDenied(
                f"External maintainer '{em_username}' cannot be assigned to reports of "
                f"category '{state.category}'."
            )

        report = _commit(state, state.evolve(assigned_external_maintainer_id=maintainer.pk))
        logger.info(
            "Report %s handed to external maintainer=%s by staff=%s",
            report_id,
            em_username,
            actor.username,
        )
        return report, maintainer


# ═══════════════════════════════════════════════════════════════════
#  Messaging Service
# ═══════════════════════════════════════════════════════════════════


class MessagingService:
    """
    Per-report message thread.

    Visibility rules
    ----------------
    * Citizen messages are always public.
    * The assigned TOSM must choose ``is_private`` explicitly.
    * The assigned EM always writes private messages.
    * Citizens read public messages only; every staff requester reads the
      whole thread.
    """

    @staticmethod
    def _resolve_visibility(report: Report, author: Any, is_private: bool | None) -> bool:
        if author.is_citizen:
            if report.citizen_id is None or report.citizen_id != author.pk:
                raise PermissionDenied(f"Citizen '{author.username}' does not own report {report.pk}.")
            return False

        if author.role == StaffRole.TOSM and report.assigned_staff_id == author.pk:
            if is_private is None:
                raise ValidationError("Technical staff must state whether the message is private.")
            return bool(is_private)

        if author.role == StaffRole.EM and report.assigned_external_maintainer_id == author.pk:
            return True

        raise PermissionDenied(f"Staff '{author.username}' is not assigned to report {report.pk}.")

    @staticmethod
    def append(report_id: int, body: str, author: Any, is_private: bool | None = None) -> WorkflowResult:
        """
        Append a message to the report thread.

        ``author`` is the citizen or staff user posting.  Staff-authored
        messages notify the report's citizen, whatever their visibility.
        """
        if body is None or not body.strip():
            raise ValidationError("Message body cannot be empty.")

        with transaction.atomic():
            report = lock_for_update(Report, report_id)
            private = MessagingService._resolve_visibility(report, author, is_private)
            last = report.messages.aggregate(last=Max("sequence"))["last"] or 0
            message = Message.objects.create(
                report=report,
                author=None if author.is_citizen else author,
                author_kind=author.kind,
                author_username="" if author.is_citizen else author.username,
                body=body.strip(),
                is_private=private,
                sequence=last + 1,
            )

        logger.info(
            "Message #%s appended to report=%s by %s=%s (private=%s)",
            message.sequence,
            report_id,
            author.kind,
            author.username,
            private,
        )

        warnings: list[str] = []
        if not author.is_citizen:
            title, text = NotificationDispatcher.render("staff_message", title=report.title)
            warnings = _collect(
                NotificationDispatcher.dispatch(NotificationDispatcher.notify_citizen, report, title, text)
            )

        return WorkflowResult(
            report=ReportQueryService.get_report(report_id),
            warnings=warnings,
            message=message,
        )

    @staticmethod
    def read_all(report_id: int, requester_kind: str, requester_id: int | None = None) -> QuerySet[Message]:
        """
        Return the thread as seen by ``requester_kind``, oldest first.

        Citizens only receive public messages, and only on their own report
        when ``requester_id`` is given; staff receive everything.
        """
        if requester_kind not in UserKind.values:
            raise ValidationError(f"Unknown requester kind '{requester_kind}'.")
        try:
            owner_id = Report.objects.values_list("citizen_id", flat=True).get(pk=report_id)
        except Report.DoesNotExist:
            raise NotFound(f"Report with id {report_id} not found.")

        qs = Message.objects.filter(report_id=report_id)
        if requester_kind == UserKind.CITIZEN:
            if requester_id is not None and owner_id != requester_id:
                raise PermissionDenied(f"Citizen {requester_id} does not own report {report_id}.")
            qs = qs.filter(is_private=False)
        return qs.order_by("created_at", "sequence")


# ═══════════════════════════════════════════════════════════════════
#  Report Workflow Service
# ═══════════════════════════════════════════════════════════════════


class ReportWorkflowService:
    """
    Orchestrates the workflow operations exposed to the API layer.

    Each method resolves its actors, delegates to the state machine /
    assignment / messaging components, and propagates the first failure.
    """

    @staticmethod
    def create_report(
        citizen_username: str,
        title: str,
        description: str,
        category: str,
        latitude: Any,
        longitude: Any,
        anonymous: Any = False,
        photos: Iterable[str] | None = None,
    ) -> WorkflowResult:
        """
        File a new ``Pending`` report for a citizen.

        At least one photo reference is required; only the first
        ``MAX_PHOTOS`` are kept.
        """
        citizen = _resolve_citizen(citizen_username)

        missing = [
            name
            for name, value in (("title", title), ("description", description), ("category", category))
            if value is None or not str(value).strip()
        ]
        if latitude is None:
            missing.append("latitude")
        if longitude is None:
            missing.append("longitude")
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}.")

        if category not in OfficeCategory.values:
            raise ValidationError(f"Unknown category '{category}'.")

        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError):
            raise ValidationError("Latitude and longitude must be numbers.")

        photo_refs = [p for p in (photos or []) if p]
        if not photo_refs:
            raise ValidationError("At least one photo is required.")
        photo_refs = photo_refs[:MAX_PHOTOS]

        if isinstance(anonymous, str):
            anonymous = anonymous.strip().lower() == "true"

        with transaction.atomic():
            report = Report.objects.create(
                citizen=citizen,
                title=title.strip(),
                description=description.strip(),
                category=category,
                latitude=lat,
                longitude=lon,
                anonymous=bool(anonymous),
                photo1=photo_refs[0],
                photo2=photo_refs[1] if len(photo_refs) > 1 else "",
                photo3=photo_refs[2] if len(photo_refs) > 2 else "",
                status=ReportStatus.PENDING,
            )

        logger.info("Report %s created by citizen=%s", report.pk, citizen.username)
        return WorkflowResult(report=report)

    @staticmethod
    def reviewer_update(
        report_id: int,
        actor_username: str,
        new_status: str,
        comment: str | None = None,
        new_category: str | None = None,
    ) -> WorkflowResult:
        """Reviewer (MPRO) accepts or rejects a pending report."""
        actor = _resolve_staff(actor_username)
        require_role(actor, StaffRole.MPRO, message="Only public relations officers can review reports.")

        state = ReportState.from_report(ReportQueryService.get_report(report_id))
        updated = apply_transition(state, new_status, Actor.from_user(actor), comment, new_category)
        report = _commit(state, updated)

        logger.info(
            "Report %s reviewed by %s: %s -> %s",
            report_id,
            actor_username,
            state.status,
            report.status,
        )
        return WorkflowResult(report=report)

    @staticmethod
    def worker_update(
        report_id: int,
        actor_username: str,
        new_status: str,
        comment: str | None = None,
    ) -> WorkflowResult:
        """Assigned TOSM or EM moves a report through execution."""
        actor = _resolve_staff(actor_username)
        require_role(
            actor, StaffRole.TOSM, StaffRole.EM,
            message="Only technical staff or external maintainers can update report progress.",
        )

        state = ReportState.from_report(ReportQueryService.get_report(report_id))
        updated = apply_transition(state, new_status, Actor.from_user(actor), comment)
        report = _commit(state, updated)

        logger.info(
            "Report %s updated by %s (%s): %s -> %s",
            report_id,
            actor_username,
            actor.role,
            state.status,
            report.status,
        )
        return WorkflowResult(report=report)

    @staticmethod
    def self_assign(report_id: int, actor_username: str) -> WorkflowResult:
        actor = _resolve_staff(actor_username)
        report = AssignmentService.self_assign(report_id, actor)
        return WorkflowResult(report=report)

    @staticmethod
    def assign_external(report_id: int, em_username: str, actor_username: str) -> WorkflowResult:
        """Hand a report to an external maintainer and notify them."""
        actor = _resolve_staff(actor_username)
        report, maintainer = AssignmentService.assign_external_maintainer(report_id, em_username, actor)

        title, body = NotificationDispatcher.render(
            "external_assignment",
            report_id=report.pk,
            title=report.title,
            assigned_by=actor.username,
        )
        warning = NotificationDispatcher.dispatch(
            NotificationDispatcher.notify_staff, maintainer.username, title, body, report=report,
        )
        return WorkflowResult(report=report, warnings=_collect(warning))

    @staticmethod
    def post_message(
        report_id: int,
        actor_username: str,
        actor_kind: str,
        body: str,
        is_private: bool | None = None,
    ) -> WorkflowResult:
        if actor_kind == UserKind.CITIZEN:
            author = _resolve_citizen(actor_username)
        elif actor_kind == UserKind.STAFF:
            author = _resolve_staff(actor_username)
        else:
            raise ValidationError(f"Unknown actor kind '{actor_kind}'.")
        return MessagingService.append(report_id, body, author, is_private)

    @staticmethod
    def list_messages(report_id: int, requester_kind: str, requester_id: int | None = None) -> QuerySet[Message]:
        return MessagingService.read_all(report_id, requester_kind, requester_id)

    @staticmethod
    def mark_notification_read(notification_id: int, recipient: Any = None) -> None:
        NotificationDispatcher.mark_read(notification_id, recipient=recipient)
