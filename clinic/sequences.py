"""Human-readable, gap-free identifiers (``PAT-00001``, ``APT-00002`` ...)."""
from __future__ import annotations

from django.db import transaction

from .models import SequenceCounter

PATIENT = 'PAT'
APPOINTMENT = 'APT'
ADMISSION = 'ADM'
PRESCRIPTION = 'PRE'


def format_number(prefix: str, value: int) -> str:
    return f"{prefix}-{value:05d}"


def next_number(prefix: str) -> str:
    """Reserve the next number for ``prefix``.

    The counter row is locked for the rest of the caller's transaction, so
    two concurrent creators can never receive the same value.  When the
    caller's transaction rolls back the reservation is released with it.
    """
    with transaction.atomic():
        counter, _ = SequenceCounter.objects.select_for_update().get_or_create(name=prefix)
        counter.value += 1
        counter.save(update_fields=['value'])
    return format_number(prefix, counter.value)
