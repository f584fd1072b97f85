"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF exception handler for the domain exceptions.
notifications      Notification creation and best-effort dispatch.
transactions       Optimistic versioned updates and row locking helpers.
access             Actor guards (citizen / staff role).

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.notifications import NotificationDispatcher
    from core.domain.transactions import versioned_update
    from core.domain.access import require_role
"""
