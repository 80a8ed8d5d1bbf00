"""
Appointment booking and lifecycle.

A doctor's ``(date, time slot)`` can be held by one appointment at a
time; cancelled and no-show appointments release it.  The check runs
before insert and is backed by a partial unique constraint, so a
concurrent double booking surfaces as :class:`ConflictError` either way.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from django.db import IntegrityError, transaction
from django.utils import timezone

from .. import repositories, sequences
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..lifecycle import APPOINTMENT_TRANSITIONS, ensure_transition
from ..models import AppointmentStatus, AppointmentType, AuditAction
from .audit import record_audit

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = 'Cancelled by front desk'
DOUBLE_BOOKED = 'Doctor already has an appointment at this time slot'
WORKDAY_START = '09:00'
WORKDAY_END = '16:30'
SLOT_MINUTES = 30


def normalize_slot(value: str) -> str:
    try:
        parsed = datetime.strptime((value or '').strip(), '%H:%M')
    except ValueError:
        raise ValidationError('Invalid time format, Use HH:MM format')
    return parsed.strftime('%H:%M')


def default_slots(start: str = WORKDAY_START, end: str = WORKDAY_END, step: int = SLOT_MINUTES) -> list[str]:
    """Slot grid from ``start`` to ``end`` inclusive."""
    current = datetime.strptime(start, '%H:%M')
    last = datetime.strptime(end, '%H:%M')
    slots = []
    while current <= last:
        slots.append(current.strftime('%H:%M'))
        current += timedelta(minutes=step)
    return slots


def _ensure_not_past(day: date) -> None:
    if day < timezone.localdate():
        raise ValidationError('Appointment date cannot be in the past')


def _resolve_doctor(doctor_id, error=ValidationError):
    doctor = repositories.users.active_doctor(doctor_id)
    if doctor is None:
        raise error('Doctor not found')
    return doctor


def create_appointment(actor, *, patient_id, doctor_id, appointment_date, time_slot, department_id=None,
                       type=AppointmentType.NORMAL, reason_for_visit='', notes='', request=None):
    _ensure_not_past(appointment_date)
    time_slot = normalize_slot(time_slot)
    patient = repositories.patients.get(patient_id, include_inactive=False)
    if patient is None:
        raise ValidationError('Patient not found')
    doctor = _resolve_doctor(doctor_id)
    department_id = department_id or doctor.department_id
    department = repositories.departments.get(department_id, include_inactive=False) if department_id else None
    if department is None:
        raise ValidationError('Department not found')
    if doctor.department_id and doctor.department_id != department.pk:
        raise ValidationError('Doctor does not belong to this department')

    if repositories.appointments.slot_taken(doctor, appointment_date, time_slot):
        raise ConflictError(DOUBLE_BOOKED)
    try:
        with transaction.atomic():
            number = sequences.next_number(sequences.APPOINTMENT)
            appointment = repositories.appointments.create(
                appointment_number=number, patient=patient, doctor=doctor, department=department,
                appointment_date=appointment_date, time_slot=time_slot, type=type,
                reason_for_visit=reason_for_visit, notes=notes, created_by=actor,
            )
            record_audit(
                user=actor, action=AuditAction.CREATE, entity_type='Appointment', entity_id=appointment.pk,
                description=f'Booked {number} for {appointment_date} {time_slot}',
                new_value={'doctorId': doctor.pk, 'date': appointment_date, 'timeSlot': time_slot},
                request=request,
            )
    except IntegrityError:
        logger.warning('double booking rejected doctor=%s %s %s', doctor.pk, appointment_date, time_slot)
        raise ConflictError(DOUBLE_BOOKED)
    logger.info('appointment %s booked doctor=%s %s %s', number, doctor.pk, appointment_date, time_slot)
    return appointment


def update_appointment(actor, appointment_id, *, request=None, **fields):
    if 'status' in fields:
        raise ValidationError('Appointment status cannot be changed through update')
    try:
        with transaction.atomic():
            appointment = repositories.appointments.get_or_404(appointment_id, lock=True)
            if appointment.status != AppointmentStatus.SCHEDULED:
                raise ConflictError(f'Cannot update an appointment that is {appointment.status}')
            if 'time_slot' in fields:
                fields['time_slot'] = normalize_slot(fields['time_slot'])
            new_date = fields.get('appointment_date', appointment.appointment_date)
            new_slot = fields.get('time_slot', appointment.time_slot)
            if 'appointment_date' in fields and new_date != appointment.appointment_date:
                _ensure_not_past(new_date)
            if (new_date, new_slot) != (appointment.appointment_date, appointment.time_slot):
                if repositories.appointments.slot_taken(
                    appointment.doctor_id, new_date, new_slot, exclude_id=appointment.pk
                ):
                    raise ConflictError(DOUBLE_BOOKED)
            old = {k: getattr(appointment, k) for k in fields}
            for key, value in fields.items():
                setattr(appointment, key, value)
            repositories.appointments.save(appointment, fields.keys())
            record_audit(
                user=actor, action=AuditAction.UPDATE, entity_type='Appointment', entity_id=appointment.pk,
                description=f'Updated {appointment.appointment_number}', old_value=old, new_value=fields,
                request=request,
            )
    except IntegrityError:
        raise ConflictError(DOUBLE_BOOKED)
    return repositories.appointments.get(appointment.pk)


def _transition(actor, appointment_id, new_status, *, request=None, **extra):
    with transaction.atomic():
        appointment = repositories.appointments.get_or_404(appointment_id, lock=True)
        old_status = appointment.status
        ensure_transition(APPOINTMENT_TRANSITIONS, 'Appointment', old_status, new_status)
        appointment.status = new_status
        for key, value in extra.items():
            setattr(appointment, key, value)
        repositories.appointments.save(appointment, ['status', *extra.keys()])
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='Appointment', entity_id=appointment.pk,
            description=f'{appointment.appointment_number} {old_status} -> {new_status}',
            old_value={'status': old_status}, new_value={'status': new_status}, request=request,
        )
    logger.info('appointment %s %s -> %s', appointment.appointment_number, old_status, new_status)
    return repositories.appointments.get(appointment.pk)


def cancel_appointment(actor, appointment_id, *, reason=None, request=None):
    return _transition(
        actor, appointment_id, AppointmentStatus.CANCELLED, request=request,
        cancellation_reason=(reason or '').strip() or DEFAULT_CANCEL_REASON,
        cancelled_by=actor, cancelled_at=timezone.now(),
    )


def start_appointment(actor, appointment_id, *, request=None):
    return _transition(actor, appointment_id, AppointmentStatus.IN_PROGRESS, request=request)


def complete_appointment(actor, appointment_id, *, request=None):
    return _transition(actor, appointment_id, AppointmentStatus.COMPLETED, request=request)


def mark_no_show(actor, appointment_id, *, request=None):
    return _transition(actor, appointment_id, AppointmentStatus.NO_SHOW, request=request)


def doctor_appointments(doctor_id, day: date | None = None):
    doctor = _resolve_doctor(doctor_id, NotFoundError)
    return list(repositories.appointments.for_doctor_on(doctor, day or timezone.localdate()))


def available_slots(doctor_id, day: date | None = None, working_hours: list[str] | None = None) -> list[str]:
    doctor = _resolve_doctor(doctor_id, NotFoundError)
    day = day or timezone.localdate()
    booked = repositories.appointments.booked_slots(doctor, day)
    grid = list(dict.fromkeys(normalize_slot(s) for s in working_hours)) if working_hours else default_slots()
    return [slot for slot in grid if slot not in booked]
