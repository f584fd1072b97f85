"""
core.domain.transactions — Helpers for safe read-modify-write updates.

Provides utilities that wrap ``transaction.atomic`` and row-level
locking into reusable patterns so that every app's service layer follows
the same concurrency-safe approach.

Two strategies are offered:

* ``versioned_update`` — optimistic compare-and-set keyed on an integer
  ``version`` column.  The caller computes the new values from a snapshot
  it read earlier; the write succeeds only if nobody else committed in
  between.  A stale writer gets ``Conflict`` and must re-read.
* ``lock_for_update`` — pessimistic ``select_for_update`` for operations
  that must serialise on a parent row (e.g. per-report message sequence).

Usage::

    from core.domain.transactions import versioned_update

    report = versioned_update(
        model_class=Report,
        pk=state.id,
        expected_version=state.version,
        changes={"status": "Assigned"},
    )
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from core.domain.exceptions import Conflict, NotFound

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=models.Model)


def versioned_update(
    *,
    model_class: type[M],
    pk: Any,
    expected_version: int,
    changes: dict[str, Any],
    version_field: str = "version",
) -> M:
    """
    Atomically apply ``changes`` to a row if its version is unchanged.

    Steps performed inside ``transaction.atomic()``:
        1. ``UPDATE ... SET <changes>, version = version + 1
           WHERE pk = <pk> AND version = <expected_version>``.
        2. If no row matched, distinguish a deleted row (``NotFound``)
           from a concurrent writer (``Conflict``).
        3. Re-read and return the fresh instance.

    Args:
        model_class:      The Django model class.
        pk:               Primary key of the row.
        expected_version: Version observed when the caller read the row.
        changes:          Field → value mapping to persist.
        version_field:    Name of the integer version column.

    Returns:
        The updated model instance.

    Raises:
        NotFound: If the row no longer exists.
        Conflict: If another writer committed first.
    """
    update_fields = dict(changes)
    update_fields[version_field] = F(version_field) + 1
    if any(f.name == "updated_at" for f in model_class._meta.get_fields()):
        update_fields["updated_at"] = timezone.now()

    with transaction.atomic():
        matched = (
            model_class.objects
            .filter(pk=pk, **{version_field: expected_version})
            .update(**update_fields)
        )
        if matched == 0:
            if not model_class.objects.filter(pk=pk).exists():
                raise NotFound(
                    f"{model_class.__name__} with pk={pk} does not exist."
                )
            logger.info(
                "Version conflict on %s pk=%s (expected version %s)",
                model_class.__name__,
                pk,
                expected_version,
            )
            raise Conflict(
                f"{model_class.__name__} {pk} was modified concurrently; "
                f"reload and retry."
            )
        return model_class.objects.get(pk=pk)


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Args:
        model_class: The Django model class.
        pk:          Primary key value.

    Returns:
        The locked model instance.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")
