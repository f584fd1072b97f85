"""
core.domain.access — Actor guards shared by the service layers.

Participium has a small, closed set of actor variants: citizens, and staff
holding exactly one ``StaffRole``.  Services call these guards instead of
inspecting role strings inline.

Usage in an app's service layer::

    from core.domain.access import require_role

    require_role(user, StaffRole.TOSM)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User


def get_user_role_name(user: User) -> str | None:
    """
    Return the role value for a staff user, ``"citizen"`` for citizens,
    or ``None`` for anonymous / unclassified users.

    Informational only (logging, API payloads).
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    if user.is_citizen:
        return "citizen"
    return user.role or None


def require_citizen(user: User, message: str = "") -> None:
    """Guard that raises ``PermissionDenied`` unless ``user`` is a citizen."""
    if user is None or not user.is_citizen:
        raise PermissionDenied(message or "Only citizens can perform this action.")


def require_role(user: User, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if ``user`` is not a staff
    member holding one of ``allowed_roles``.
    """
    if user is None or not user.is_staff_member or user.role not in allowed_roles:
        role_name = get_user_role_name(user) if user is not None else None
        raise PermissionDenied(
            message
            or f"Role '{role_name}' is not permitted for this operation. "
            f"Required: {', '.join(str(r) for r in allowed_roles)}."
        )
