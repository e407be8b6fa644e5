"""
Row-level concurrency helpers for state-machine models.

All coordination goes through the database: there are no in-process locks.
Two primitives are provided and are meant to be used together:

1. **Pessimistic locking** (lock_for_update)
   - SELECT ... FOR UPDATE inside the caller's transaction
   - Serializes concurrent writers on the same row (Postgres)

2. **Compare-and-swap** (compare_and_swap)
   - UPDATE ... WHERE pk=? AND version=? AND <expected state>
   - Zero matched rows means another writer won; raises StaleRecordError
   - Still correct on backends that ignore FOR UPDATE (SQLite)

Usage:
    from core.locking import compare_and_swap, lock_for_update

    with transaction.atomic():
        appointment = lock_for_update(Appointment, appointment_id)
        previous = appointment.status
        appointment.confirm(by=practitioner)
        compare_and_swap(
            appointment,
            expected={"status": previous},
            fields=["status", "practitioner_confirmed_at"],
        )

Models used with compare_and_swap must define a ``version`` integer field.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from django.db import models
from django.db.models import F
from django.utils import timezone

from core.exceptions import NotFoundError, StaleRecordError

if TYPE_CHECKING:
    from typing import Any

T = TypeVar("T", bound=models.Model)


def lock_for_update(
    model_class: type[T],
    pk: Any,
    *,
    error_code: str | None = None,
    **filters: Any,
) -> T:
    """
    Fetch a row with SELECT ... FOR UPDATE.

    Must be called inside transaction.atomic(); the lock is held until the
    transaction ends.

    Args:
        model_class: Django model class
        pk: Primary key of the record
        error_code: NotFoundError code (defaults to "<MODEL>_NOT_FOUND")
        **filters: Extra filters, e.g. ownership checks

    Raises:
        NotFoundError: If no row matches
    """
    instance = (
        model_class.objects.select_for_update().filter(pk=pk, **filters).first()
    )
    if instance is None:
        model_name = model_class.__name__
        raise NotFoundError(
            f"{model_name} not found",
            error_code=error_code or f"{model_name.upper()}_NOT_FOUND",
            details={"pk": str(pk)},
        )
    return instance


def compare_and_swap(
    instance: models.Model,
    *,
    expected: dict[str, Any],
    fields: list[str],
) -> None:
    """
    Persist ``fields`` only if the stored row still matches ``expected``.

    The write is a single UPDATE filtered on primary key, the in-memory
    version and every expected column value. On success the version is
    bumped both in storage and on the instance.

    Args:
        instance: Model instance carrying the new values
        expected: Column values the stored row must still hold
        fields: Names of fields to write from the instance

    Raises:
        StaleRecordError: If another writer changed the row first
    """
    model_class = type(instance)
    values = {name: getattr(instance, name) for name in fields}
    values["version"] = F("version") + 1
    values["updated_at"] = timezone.now()

    updated = model_class.objects.filter(
        pk=instance.pk,
        version=instance.version,
        **expected,
    ).update(**values)

    if updated == 0:
        model_name = model_class.__name__
        raise StaleRecordError(
            f"{model_name} {instance.pk} was modified by another request",
            details={
                "pk": str(instance.pk),
                "expected_version": instance.version,
                **{f"expected_{key}": str(value) for key, value in expected.items()},
            },
        )

    instance.version += 1
    instance.updated_at = values["updated_at"]
