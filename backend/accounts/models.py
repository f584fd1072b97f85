"""
Accounts app models.

Defines the municipal ``Office`` catalogue and a custom User model that
extends Django's ``AbstractUser``.  A user is either a **citizen** (reports
issues, talks to the staff working on them) or a **staff** member holding
exactly one role from a closed set:

    Admin  — system administrator
    MPRO   — Municipal Public Relations Officer, reviews new reports
    TOSM   — Technical Office Staff Member, performs the work
    EM     — External Maintainer, second-tier assignee engaged by a TOSM

Staff members are affiliated with one or more offices; each office covers
one ``OfficeCategory``.
"""

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class OfficeCategory(models.TextChoices):
    """The nine fixed office categories a report can be filed under."""

    MUNICIPAL_ORGANIZATION = "Municipal Organization", "Municipal Organization"
    WATER_SUPPLY = "Water Supply", "Water Supply"
    ARCHITECTURAL_BARRIERS = "Architectural Barriers", "Architectural Barriers"
    SEWER_SYSTEM = "Sewer System", "Sewer System"
    PUBLIC_LIGHTING = "Public Lighting", "Public Lighting"
    WASTE = "Waste", "Waste"
    ROAD_SIGNS_AND_TRAFFIC_LIGHTS = "Road Signs and Traffic Lights", "Road Signs and Traffic Lights"
    ROADS_AND_URBAN_FURNISHINGS = "Roads and Urban Furnishings", "Roads and Urban Furnishings"
    PUBLIC_GREEN_AREAS_AND_PLAYGROUNDS = (
        "Public Green Areas and Playgrounds",
        "Public Green Areas and Playgrounds",
    )


class UserKind(models.TextChoices):
    CITIZEN = "citizen", "Citizen"
    STAFF = "staff", "Staff"


class StaffRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    MPRO = "mpro", "Municipal Public Relations Officer"
    TOSM = "tosm", "Technical Office Staff Member"
    EM = "em", "External Maintainer"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Office(models.Model):
    """
    A municipal (or external contractor) office responsible for one
    category of reports.
    """

    name = models.CharField(
        max_length=150,
        unique=True,
        verbose_name="Office Name",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    category = models.CharField(
        max_length=50,
        choices=OfficeCategory.choices,
        verbose_name="Category",
        db_index=True,
    )
    is_external = models.BooleanField(
        default=False,
        verbose_name="External Office",
        help_text="Offices of external maintainers (contractors).",
    )

    class Meta:
        verbose_name = "Office"
        verbose_name_plural = "Offices"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.category})"


class User(AbstractUser):
    """
    Custom user model shared by citizens and staff.

    ``role`` is only meaningful for staff; citizens keep it blank.
    Use the ``Citizen`` / ``Staff`` proxies to query one population.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    kind = models.CharField(
        max_length=10,
        choices=UserKind.choices,
        default=UserKind.CITIZEN,
        verbose_name="Account Kind",
        db_index=True,
    )
    role = models.CharField(
        max_length=10,
        choices=StaffRole.choices,
        blank=True,
        default="",
        verbose_name="Staff Role",
    )
    offices = models.ManyToManyField(
        Office,
        blank=True,
        related_name="members",
        verbose_name="Offices",
    )
    telegram_username = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        unique=True,
        verbose_name="Telegram Username",
    )
    receive_emails = models.BooleanField(
        default=True,
        verbose_name="Receive E-mails",
    )

    REQUIRED_FIELDS = ["email"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        if self.is_staff_member:
            return f"{self.username} ({self.get_role_display()})"
        return self.username

    # ── Helper predicates ────────────────────────────────────────────

    @property
    def is_citizen(self) -> bool:
        return self.kind == UserKind.CITIZEN

    @property
    def is_staff_member(self) -> bool:
        return self.kind == UserKind.STAFF

    def covers_category(self, category: str) -> bool:
        """True if one of the user's offices handles ``category``."""
        return self.offices.filter(category=category).exists()

    @property
    def office_categories(self) -> list[str]:
        return list(self.offices.values_list("category", flat=True).distinct())


class CitizenManager(UserManager):
    def get_queryset(self):
        return super().get_queryset().filter(kind=UserKind.CITIZEN)

    def create_user(self, username, email=None, password=None, **extra_fields):
        extra_fields["kind"] = UserKind.CITIZEN
        return super().create_user(username, email, password, **extra_fields)


class StaffManager(UserManager):
    def get_queryset(self):
        return super().get_queryset().filter(kind=UserKind.STAFF)

    def create_user(self, username, email=None, password=None, **extra_fields):
        extra_fields["kind"] = UserKind.STAFF
        return super().create_user(username, email, password, **extra_fields)


class Citizen(User):
    """Proxy exposing only citizen accounts."""

    objects = CitizenManager()

    class Meta:
        proxy = True
        verbose_name = "Citizen"
        verbose_name_plural = "Citizens"


class Staff(User):
    """Proxy exposing only staff accounts."""

    objects = StaffManager()

    class Meta:
        proxy = True
        verbose_name = "Staff Member"
        verbose_name_plural = "Staff Members"
