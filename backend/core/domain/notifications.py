"""
core.domain.notifications — Notification creation and best-effort dispatch.

Centralises notification creation so every service uses one consistent
entry-point rather than directly constructing ``Notification`` objects.

Design decisions
----------------
* **Addressee resolution** — ``notify_citizen`` resolves the report's
  owning citizen, ``notify_staff`` resolves a staff member by username.
  Either raises ``NotFound`` when the addressee cannot be resolved.
* **Fire-and-forget** — workflow services call ``dispatch`` after their
  primary transaction commits.  ``dispatch`` never raises: transient
  database errors are retried (``NOTIFICATION_DISPATCH_ATTEMPTS``) and any
  remaining failure is logged and returned as a warning string.

Usage::

    from core.domain.notifications import NotificationDispatcher

    warning = NotificationDispatcher.dispatch(
        NotificationDispatcher.notify_citizen,
        report,
        *NotificationDispatcher.render("staff_message", title=report.title),
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from django.conf import settings
from django.db import DatabaseError
from django.db.models import QuerySet

from core.domain.exceptions import NotFound

if TYPE_CHECKING:
    from accounts.models import User
    from core.models import Notification
    from reports.models import Report

logger = logging.getLogger(__name__)

# ── Event-type → (title, message) templates ─────────────────────────
_EVENT_TEMPLATES: dict[str, tuple[str, str]] = {
    "staff_message":       ("New message on your report",
                            'A staff member has sent a message regarding your report "{title}".'),
    "external_assignment": ("Report assigned to you",
                            'Report #{report_id} "{title}" has been assigned to you by {assigned_by}.'),
}


class NotificationDispatcher:
    """
    Stateless helper for creating and updating ``Notification`` records.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def render(cls, event_type: str, **context: Any) -> tuple[str, str]:
        """Return ``(title, body)`` for ``event_type`` filled with ``context``."""
        title, body = _EVENT_TEMPLATES.get(
            event_type,
            (event_type.replace("_", " ").title(), f"Event: {event_type}"),
        )
        return title, body.format(**context)

    @classmethod
    def notify_citizen(cls, report: Report, title: str, body: str) -> Notification:
        """
        Create a notification addressed to the citizen owning ``report``.

        Raises:
            NotFound: If the report has no citizen or the citizen record
                      no longer exists.
        """
        from accounts.models import Citizen
        from core.models import Notification

        citizen = None
        if report.citizen_id is not None:
            citizen = Citizen.objects.filter(pk=report.citizen_id).first()
        if citizen is None:
            raise NotFound(f"Citizen owning report {report.pk} not found.")

        notification = Notification.objects.create(
            recipient=citizen,
            report=report,
            title=title,
            message=body,
        )
        logger.info(
            "Notified citizen=%s about report=%s [%s]",
            citizen.username,
            report.pk,
            title,
        )
        return notification

    @classmethod
    def notify_staff(
        cls,
        staff_username: str,
        title: str,
        body: str,
        report: Report | None = None,
    ) -> Notification:
        """
        Create a notification addressed to the staff member ``staff_username``.

        Raises:
            NotFound: If no staff member has that username.
        """
        from accounts.models import Staff
        from core.models import Notification

        staff = Staff.objects.filter(username=staff_username).first()
        if staff is None:
            raise NotFound(f"Staff with username '{staff_username}' not found.")

        notification = Notification.objects.create(
            recipient=staff,
            report=report,
            title=title,
            message=body,
        )
        logger.info("Notified staff=%s [%s]", staff_username, title)
        return notification

    @classmethod
    def mark_read(cls, notification_id: int, recipient: User | None = None) -> Notification:
        """
        Mark a notification as read.  Marking it again is a no-op.

        When ``recipient`` is given, notifications of other users are
        reported as ``NotFound``.
        """
        from core.models import Notification

        qs = Notification.objects.all()
        if recipient is not None:
            qs = qs.filter(recipient=recipient)
        try:
            notification = qs.get(pk=notification_id)
        except Notification.DoesNotExist:
            raise NotFound(f"Notification with id {notification_id} not found.")

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
        return notification

    @classmethod
    def list_for(cls, recipient: User) -> QuerySet:
        """Return all notifications for ``recipient``, most recent first."""
        from core.models import Notification

        return (
            Notification.objects
            .filter(recipient=recipient)
            .select_related("report")
            .order_by("-created_at", "-id")
        )

    @classmethod
    def dispatch(cls, send: Callable[..., Any], *args: Any, **kwargs: Any) -> str | None:
        """
        Run ``send(*args, **kwargs)`` without letting it fail the caller.

        ``NotFound`` is permanent and is not retried.  ``DatabaseError`` is
        retried until ``NOTIFICATION_DISPATCH_ATTEMPTS`` is exhausted.

        Returns:
            ``None`` on success, otherwise a warning message describing the
            undelivered notification.
        """
        attempts = max(1, getattr(settings, "NOTIFICATION_DISPATCH_ATTEMPTS", 2))
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                send(*args, **kwargs)
                return None
            except NotFound as exc:
                logger.warning("Notification dropped: %s", exc)
                return f"Notification not delivered: {exc}"
            except DatabaseError as exc:
                last_error = exc
                logger.warning(
                    "Notification dispatch attempt %d/%d failed: %s",
                    attempt,
                    attempts,
                    exc,
                )

        logger.error(
            "Notification dispatch gave up after %d attempt(s); "
            "manual follow-up required: %s",
            attempts,
            last_error,
        )
        return f"Notification not delivered: {last_error}"
