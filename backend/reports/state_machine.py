"""
Report status state machine.

A report is represented here by an immutable ``ReportState`` snapshot.
``apply_transition`` validates a requested status change against the
transition table and the role policy and returns a *new* snapshot; it
never touches the database.  The service layer persists the result with a
single versioned update, so a concurrent writer that committed first makes
the stale write fail with ``Conflict``.

Transition table::

    Pending   → Assigned | Rejected
    Assigned  → In Progress | Resolved
    In Progress → Suspended | Resolved
    Suspended → In Progress
    Rejected, Resolved: terminal
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from core.domain.exceptions import InvalidTransition

from . import policy
from .models import ReportStatus

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.ASSIGNED, ReportStatus.REJECTED}),
    ReportStatus.ASSIGNED: frozenset({ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED}),
    ReportStatus.IN_PROGRESS: frozenset({ReportStatus.SUSPENDED, ReportStatus.RESOLVED}),
    ReportStatus.SUSPENDED: frozenset({ReportStatus.IN_PROGRESS}),
    ReportStatus.REJECTED: frozenset(),
    ReportStatus.RESOLVED: frozenset(),
}

TERMINAL_STATUSES: frozenset[str] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# ReportState field → Report model field written by the workflow.
_PERSISTED_FIELDS = (
    "status",
    "category",
    "comment",
    "assigned_staff_id",
    "assigned_external_maintainer_id",
)


@dataclass(frozen=True)
class ReportState:
    """Snapshot of the workflow-relevant fields of a report."""

    id: int | None
    version: int
    status: str
    category: str
    citizen_id: int | None = None
    assigned_staff_id: int | None = None
    assigned_external_maintainer_id: int | None = None
    comment: str | None = None

    @classmethod
    def from_report(cls, report: Any) -> ReportState:
        return cls(
            id=report.pk,
            version=report.version,
            status=report.status,
            category=report.category,
            citizen_id=report.citizen_id,
            assigned_staff_id=report.assigned_staff_id,
            assigned_external_maintainer_id=report.assigned_external_maintainer_id,
            comment=report.comment,
        )

    def evolve(self, **changes: Any) -> ReportState:
        return dataclasses.replace(self, **changes)

    def changes_since(self, previous: ReportState) -> dict[str, Any]:
        """Model field values that differ from ``previous``."""
        return {
            name: getattr(self, name)
            for name in _PERSISTED_FIELDS
            if getattr(self, name) != getattr(previous, name)
        }

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def apply_transition(
    state: ReportState,
    requested_status: str,
    actor: policy.Actor,
    comment: str | None = None,
    new_category: str | None = None,
) -> ReportState:
    """
    Validate a status change and return the resulting snapshot.

    Checks, in order: transition table (``InvalidTransition``), role and
    assignment policy (``PermissionDenied``), comment policy
    (``MissingComment`` / ``InvalidComment``), category policy
    (``ValidationError``).  Nothing is applied unless every check passes.
    """
    if requested_status not in ALLOWED_TRANSITIONS:
        raise InvalidTransition(
            current=state.status,
            target=str(requested_status),
            reason="unknown status",
        )
    if not can_transition(state.status, requested_status):
        raise InvalidTransition(current=state.status, target=requested_status)

    decision = policy.authorize_transition(actor, state, requested_status)
    persisted_comment = policy.check_comment(decision, requested_status, comment)
    category = policy.check_category(decision, state, requested_status, new_category)

    changes: dict[str, Any] = {"status": requested_status, "category": category}
    if persisted_comment is not None:
        changes["comment"] = persisted_comment
    return state.evolve(**changes)
