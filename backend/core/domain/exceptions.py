"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global DRF exception handler
(``core.domain.exception_handler``) maps them to HTTP responses.

Every class carries a stable ``code`` string so that callers can branch on
the error *kind* without parsing the message.

Mapping cheatsheet
------------------
┌─────────────────────┬─────────────────────┬──────┐
│ Domain Exception    │ code                │ HTTP │
├─────────────────────┼─────────────────────┼──────┤
│ DomainError         │ domain_error        │ 400  │
│ ValidationError     │ validation_error    │ 400  │
│ MissingComment      │ missing_comment     │ 400  │
│ InvalidComment      │ invalid_comment     │ 400  │
│ PermissionDenied    │ forbidden           │ 403  │
│ NotFound            │ not_found           │ 404  │
│ Conflict            │ conflict            │ 409  │
│ InvalidState        │ invalid_state       │ 409  │
│ InvalidTransition   │ invalid_transition  │ 409  │
└─────────────────────┴─────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current=current, target=target)
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    code = "domain_error"

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Missing or malformed input (e.g. report creation fields)."""

    code = "validation_error"

    def __init__(self, message: str = "The supplied data is invalid.") -> None:
        super().__init__(message)


class MissingComment(ValidationError):
    """A comment is mandatory for the requested status (``Rejected``)."""

    code = "missing_comment"

    def __init__(self, message: str = "A comment is required for this status change.") -> None:
        super().__init__(message)


class InvalidComment(ValidationError):
    """A comment was supplied for a status that does not accept one."""

    code = "invalid_comment"

    def __init__(self, message: str = "A comment is not allowed for this status change.") -> None:
        super().__init__(message)


class PermissionDenied(DomainError):
    """
    The actor does not hold the role or assignment relationship required
    for this operation.

    Maps to HTTP 403.
    """

    code = "forbidden"

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The referenced report, user or notification does not exist.

    Maps to HTTP 404.
    """

    code = "not_found"

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: double self-assignment, lost optimistic-lock race.
    Maps to HTTP 409.
    """

    code = "conflict"

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidState(Conflict):
    """
    The resource is not in a state where the operation applies
    (e.g. self-assigning a report that is not ``Assigned``).
    """

    code = "invalid_state"

    def __init__(self, message: str = "The resource is not in a valid state for this operation.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A state-machine transition that is not an edge of the transition table.

    Example::

        raise InvalidTransition(
            current="Pending",
            target="Resolved",
        )
    """

    code = "invalid_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason
