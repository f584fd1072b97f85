"""
Reports app models.

Covers the life of a citizen report: submission (``Pending``), review by a
public-relations officer, self-assignment by technical staff, optional
hand-over to an external maintainer, and closure (``Resolved`` or
``Rejected``).  Each report owns an append-only message thread.
"""

from django.conf import settings
from django.db import models

from accounts.models import OfficeCategory, UserKind
from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ReportStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    ASSIGNED = "Assigned", "Assigned"
    IN_PROGRESS = "In Progress", "In Progress"
    SUSPENDED = "Suspended", "Suspended"
    REJECTED = "Rejected", "Rejected"
    RESOLVED = "Resolved", "Resolved"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Report(TimeStampedModel):
    """
    An urban issue reported by a citizen.

    * ``status`` only moves along the edges of
      ``reports.state_machine.ALLOWED_TRANSITIONS``.
    * ``assigned_external_maintainer`` is only ever set after
      ``assigned_staff``.
    * ``version`` is bumped by every workflow write; stale writers get a
      ``Conflict`` instead of overwriting a concurrent change.
    """

    citizen = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reports",
        verbose_name="Citizen",
    )
    title = models.CharField(
        max_length=255,
        verbose_name="Title",
    )
    description = models.TextField(
        verbose_name="Description",
    )
    category = models.CharField(
        max_length=50,
        choices=OfficeCategory.choices,
        verbose_name="Category",
        db_index=True,
    )
    status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        default=ReportStatus.PENDING,
        verbose_name="Status",
        db_index=True,
    )
    latitude = models.FloatField(verbose_name="Latitude")
    longitude = models.FloatField(verbose_name="Longitude")
    anonymous = models.BooleanField(
        default=False,
        verbose_name="Anonymous",
        help_text="Hide the citizen's username from public representations.",
    )

    # ── Photo references (storage handled outside the workflow) ─────
    photo1 = models.CharField(max_length=500, verbose_name="Photo 1")
    photo2 = models.CharField(max_length=500, blank=True, default="", verbose_name="Photo 2")
    photo3 = models.CharField(max_length=500, blank=True, default="", verbose_name="Photo 3")

    comment = models.TextField(
        null=True,
        blank=True,
        verbose_name="Comment",
        help_text="Mandatory on rejection, optional on resolution.",
    )

    # ── Assignment ──────────────────────────────────────────────────
    assigned_staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_reports",
        verbose_name="Assigned Staff (TOSM)",
    )
    assigned_external_maintainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="external_reports",
        verbose_name="Assigned External Maintainer",
    )

    version = models.PositiveIntegerField(
        default=1,
        verbose_name="Version",
    )

    class Meta:
        verbose_name = "Report"
        verbose_name_plural = "Reports"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status", "category"], name="report_status_category_idx"),
        ]

    def __str__(self):
        return f"Report #{self.pk}: {self.title} [{self.status}]"

    @property
    def photos(self) -> list[str]:
        return [p for p in (self.photo1, self.photo2, self.photo3) if p]


class Message(models.Model):
    """
    One entry of a report thread.

    ``author_kind`` and ``author_username`` are fixed when the message is
    written, so the attribution survives deletion of the staff account that
    ``author`` points to.  Citizen messages carry no ``author``; they belong
    to the report's citizen.  Messages are created once and never edited.
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name="messages",
        verbose_name="Report",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="report_messages",
        verbose_name="Staff Author",
    )
    author_kind = models.CharField(
        max_length=10,
        choices=UserKind.choices,
        verbose_name="Author Kind",
    )
    author_username = models.CharField(
        max_length=150,
        blank=True,
        default="",
        verbose_name="Author Username",
        help_text="Staff username at posting time; blank for citizen messages.",
    )
    body = models.TextField(verbose_name="Body")
    is_private = models.BooleanField(
        default=False,
        verbose_name="Private",
        help_text="Private messages are only visible to staff.",
    )
    sequence = models.PositiveIntegerField(
        verbose_name="Sequence",
        help_text="Position in the report thread, assigned at append time.",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )

    class Meta:
        verbose_name = "Message"
        verbose_name_plural = "Messages"
        ordering = ["created_at", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["report", "sequence"],
                name="unique_message_sequence_per_report",
            ),
        ]

    def __str__(self):
        author = self.author_username or "citizen"
        return f"Message #{self.sequence} on report {self.report_id} by {author}"

    @property
    def is_from_citizen(self) -> bool:
        return self.author_kind == UserKind.CITIZEN
