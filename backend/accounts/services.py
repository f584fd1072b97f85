"""
Accounts Service Layer.

Views stay thin: they validate query parameters through serializers, call
a service method and wrap the result in a DRF ``Response``.

- ``StaffDirectoryService`` — staff lookups needed by the report workflow.
"""

from __future__ import annotations

import logging

from django.db.models import QuerySet

from .models import Staff, StaffRole

logger = logging.getLogger(__name__)


class StaffDirectoryService:
    """Read-only staff listings."""

    @staticmethod
    def list_external_maintainers(*, category: str | None = None) -> QuerySet[Staff]:
        """
        Active external maintainers, optionally only those whose offices
        cover ``category``.

        A technical staff member uses this to pick the ``em_username``
        passed to the external assignment of a report.
        """
        qs = Staff.objects.filter(role=StaffRole.EM, is_active=True).prefetch_related("offices")
        if category:
            qs = qs.filter(offices__category=category).distinct()
        logger.debug("Listing external maintainers (category=%s)", category or "any")
        return qs.order_by("username")
