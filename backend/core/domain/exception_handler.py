"""
core.domain.exception_handler — Maps workflow errors to HTTP responses.

Every ``DomainError`` is rendered as ``{"detail": ..., "code": ...}`` with
the status of its error kind.  An ``InvalidTransition`` that knows its
endpoints also reports ``current`` and ``target`` so a client can refresh
the report and retry.

Wired through ``REST_FRAMEWORK["EXCEPTION_HANDLER"]`` in
``participium/settings.py``.
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses of Conflict (InvalidState, InvalidTransition) land on 409.
_ERROR_STATUS: tuple[tuple[type[DomainError], int], ...] = (
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
    (DomainError, status.HTTP_400_BAD_REQUEST),
)


def _status_for(exc: DomainError) -> int:
    return next(code for kind, code in _ERROR_STATUS if isinstance(exc, kind))


def _body_for(exc: DomainError) -> dict:
    body = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, InvalidTransition) and exc.current and exc.target:
        body["current"] = exc.current
        body["target"] = exc.target
    return body


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF's own exceptions go through the default handler; domain errors are
    rendered here and anything else is left to propagate as a 500.
    """
    response = drf_default_handler(exc, context)
    if response is not None or not isinstance(exc, DomainError):
        return response

    status_code = _status_for(exc)
    logger.warning(
        "%s (%s) in %s: %s",
        type(exc).__name__,
        status_code,
        type(context.get("view")).__name__ if context.get("view") else "unknown view",
        exc,
    )
    return Response(_body_for(exc), status=status_code)
