"""
Role authorization policy for report status changes.

Pure functions only: no database access, no side effects.  The policy is
expressed as data so it can be reviewed and unit-tested as a table.

``TRANSITION_RULES`` maps ``(role, current_status)`` to the set of target
statuses that role may request.  A pair missing from the table means the
role may not touch a report in that status at all.

Worker roles are additionally gated on the report's assignment:

* ``TOSM`` only acts on reports whose ``assigned_staff`` is the actor.
* ``EM`` only acts on reports whose ``assigned_external_maintainer`` is the
  actor, and only once an internal staff member has been assigned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from accounts.models import OfficeCategory, StaffRole
from core.domain.exceptions import (
    InvalidComment,
    MissingComment,
    PermissionDenied,
    ValidationError,
)

from .models import ReportStatus

if TYPE_CHECKING:
    from .state_machine import ReportState


_WORKER_SOURCES = (ReportStatus.ASSIGNED, ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED)
_WORKER_TARGETS = frozenset({ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED, ReportStatus.RESOLVED})

TRANSITION_RULES: dict[tuple[str, str], frozenset[str]] = {
    (StaffRole.MPRO, ReportStatus.PENDING): frozenset({ReportStatus.ASSIGNED, ReportStatus.REJECTED}),
    **{(StaffRole.TOSM, source): _WORKER_TARGETS for source in _WORKER_SOURCES},
    **{(StaffRole.EM, source): _WORKER_TARGETS for source in _WORKER_SOURCES},
}

#: Target statuses that accept a comment, and those that require one.
COMMENT_ALLOWED: frozenset[str] = frozenset({ReportStatus.REJECTED, ReportStatus.RESOLVED})
COMMENT_REQUIRED: frozenset[str] = frozenset({ReportStatus.REJECTED})


@dataclass(frozen=True)
class Actor:
    """The staff member (or citizen) performing an operation."""

    id: int
    username: str
    role: str = ""

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        return cls(id=user.pk, username=user.username, role=user.role or "")


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating one requested transition."""

    allowed: bool
    reason: str = ""
    comment_required: bool = False
    comment_allowed: bool = False
    category_change_allowed: bool = False


def evaluate(actor: Actor, state: ReportState, target: str) -> Decision:
    """
    Decide whether ``actor`` may move a report in ``state`` to ``target``.

    Does not check that ``(state.status, target)`` is an edge of the state
    machine; ``apply_transition`` does that first.
    """
    allowed_targets = TRANSITION_RULES.get((actor.role, state.status), frozenset())
    if target not in allowed_targets:
        return Decision(
            allowed=False,
            reason=(
                f"Role '{actor.role or 'none'}' cannot move a report "
                f"from '{state.status}' to '{target}'."
            ),
        )

    if actor.role == StaffRole.TOSM and state.assigned_staff_id != actor.id:
        return Decision(allowed=False, reason="This report is not assigned to you.")

    if actor.role == StaffRole.EM:
        if state.assigned_staff_id is None:
            return Decision(allowed=False, reason="Report is not assigned to a technical staff member yet.")
        if state.assigned_external_maintainer_id != actor.id:
            return Decision(allowed=False, reason="This report is not assigned to you.")

    return Decision(
        allowed=True,
        comment_required=target in COMMENT_REQUIRED,
        comment_allowed=target in COMMENT_ALLOWED,
        category_change_allowed=(
            actor.role == StaffRole.MPRO and target == ReportStatus.ASSIGNED
        ),
    )


def authorize_transition(actor: Actor, state: ReportState, target: str) -> Decision:
    """Like ``evaluate`` but raises ``PermissionDenied`` on denial."""
    decision = evaluate(actor, state, target)
    if not decision.allowed:
        raise PermissionDenied(decision.reason)
    return decision


def check_comment(decision: Decision, target: str, comment: str | None) -> str | None:
    """
    Enforce the comment policy and return the comment to persist.

    Blank comments count as absent.  The supplied text is kept verbatim.
    """
    has_comment = comment is not None and comment.strip() != ""
    if decision.comment_required and not has_comment:
        raise MissingComment(f"A comment is required to move a report to '{target}'.")
    if has_comment and not decision.comment_allowed:
        raise InvalidComment(f"A comment cannot be given when moving a report to '{target}'.")
    return comment if has_comment else None


def check_category(
    decision: Decision,
    state: ReportState,
    target: str,
    new_category: str | None,
) -> str:
    """
    Enforce the category policy and return the category to persist.

    A category change is only accepted while assigning a pending report,
    and a report cannot be assigned while it is still filed under the
    catch-all ``Municipal Organization`` category.
    """
    if new_category is not None:
        if not decision.category_change_allowed:
            raise ValidationError(f"The category cannot be changed when moving a report to '{target}'.")
        if new_category not in OfficeCategory.values:
            raise ValidationError(f"Unknown category '{new_category}'.")
        category = new_category
    else:
        category = state.category

    if target == ReportStatus.ASSIGNED and category == OfficeCategory.MUNICIPAL_ORGANIZATION:
        raise ValidationError(
            "A report cannot be assigned to the Municipal Organization office; "
            "choose the category of the responsible office."
        )
    return category
