"""
State machines for the entities that move through a lifecycle.

Each table maps a status to the statuses it may move to.  Services call
:func:`ensure_transition` before mutating a status; nothing in the
persistence layer changes status implicitly.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from .exceptions import ConflictError
from .models import (
    AdmissionStatus,
    AppointmentStatus,
    EmergencyStatus,
    PaymentStatus,
    PrescriptionStatus,
    RestockStatus,
)

logger = logging.getLogger(__name__)

APPOINTMENT_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.IN_PROGRESS: {AppointmentStatus.COMPLETED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.NO_SHOW: set(),
}

PRESCRIPTION_TRANSITIONS = {
    PrescriptionStatus.PENDING: {
        PrescriptionStatus.DISPENSED,
        PrescriptionStatus.PARTIALLY_DISPENSED,
        PrescriptionStatus.CANCELLED,
    },
    PrescriptionStatus.PARTIALLY_DISPENSED: {
        PrescriptionStatus.DISPENSED,
        PrescriptionStatus.PARTIALLY_DISPENSED,
    },
    PrescriptionStatus.DISPENSED: set(),
    PrescriptionStatus.CANCELLED: set(),
}

ADMISSION_TRANSITIONS = {
    AdmissionStatus.ACTIVE: {AdmissionStatus.DISCHARGED, AdmissionStatus.TRANSFERRED},
    AdmissionStatus.DISCHARGED: set(),
    AdmissionStatus.TRANSFERRED: set(),
}

RESTOCK_TRANSITIONS = {
    RestockStatus.PENDING: {RestockStatus.APPROVED, RestockStatus.REJECTED},
    RestockStatus.APPROVED: {RestockStatus.FULFILLED},
    RestockStatus.REJECTED: set(),
    RestockStatus.FULFILLED: set(),
}

EMERGENCY_TERMINAL = {
    EmergencyStatus.DISCHARGED,
    EmergencyStatus.REFERRED,
    EmergencyStatus.DECEASED,
}

EMERGENCY_TRANSITIONS = {
    EmergencyStatus.REGISTERED: {EmergencyStatus.ADMITTED} | EMERGENCY_TERMINAL,
    EmergencyStatus.ADMITTED: set(EMERGENCY_TERMINAL),
    EmergencyStatus.DISCHARGED: set(),
    EmergencyStatus.REFERRED: set(),
    EmergencyStatus.DECEASED: set(),
}

# Payment only ever moves forward.
PAYMENT_RANK = {
    PaymentStatus.AWAITING_PAYMENT: 0,
    PaymentStatus.PARTIALLY_PAID: 1,
    PaymentStatus.PAID: 2,
}


def can_transition(table: dict, current: str, new: str) -> bool:
    return new in table.get(current, ())


def ensure_transition(table: dict, entity: str, current: str, new: str) -> None:
    """Raise :class:`ConflictError` unless ``current -> new`` is allowed."""
    if not can_transition(table, current, new):
        logger.warning('rejected %s transition %s -> %s', entity, current, new)
        raise ConflictError(f'{entity} cannot move from {current} to {new}')


def payment_status_for(amount_paid: Decimal, total_amount: Decimal, current: str | None = None) -> str:
    """Payment status implied by the amounts, never lower than ``current``."""
    if amount_paid >= total_amount and amount_paid > 0:
        derived = PaymentStatus.PAID
    elif amount_paid > 0:
        derived = PaymentStatus.PARTIALLY_PAID
    else:
        derived = PaymentStatus.AWAITING_PAYMENT
    if current and PAYMENT_RANK.get(current, 0) > PAYMENT_RANK[derived]:
        return current
    return derived
