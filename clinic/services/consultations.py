import logging

from django.db import transaction
from django.utils import timezone

from .. import repositories
from ..exceptions import ConflictError, ValidationError
from ..models import AppointmentType, AuditAction, ConsultationOutcome, Role
from . import appointments as appointment_service
from .audit import record_audit

logger = logging.getLogger(__name__)


def _resolve_doctor(actor, doctor_id):
    if doctor_id:
        doctor = repositories.users.active_doctor(doctor_id)
        if doctor is None:
            raise ValidationError('Doctor not found')
        return doctor
    if actor.role == Role.DOCTOR:
        return actor
    raise ValidationError('Patient ID, Doctor ID and Symptoms are required')


def _check_referral(outcome, fields):
    if outcome == ConsultationOutcome.REFERRED and not fields.get('referred_department_id'):
        raise ValidationError('Referral department is required for a referred outcome')
    if fields.get('referred_department_id'):
        if repositories.departments.get(fields['referred_department_id'], include_inactive=False) is None:
            raise ValidationError('Department not found')
    if fields.get('referred_doctor_id'):
        if repositories.users.active_doctor(fields['referred_doctor_id']) is None:
            raise ValidationError('Referred doctor not found')


def _check_follow_up(outcome, follow_up_date):
    if outcome == ConsultationOutcome.FOLLOW_UP and not follow_up_date:
        raise ValidationError('Follow-up date is required for a follow-up outcome')
    if follow_up_date and follow_up_date < timezone.localdate():
        raise ValidationError('Follow-up date cannot be in the past')


def create_consultation(actor, *, patient_id, symptoms, diagnosis, outcome, doctor_id=None,
                        appointment_id=None, request=None, **fields):
    if not patient_id or not symptoms:
        raise ValidationError('Patient ID, Doctor ID and Symptoms are required')
    patient = repositories.patients.get(patient_id, include_inactive=False)
    if patient is None:
        raise ValidationError('Patient not found')
    doctor = _resolve_doctor(actor, doctor_id)
    appointment = None
    if appointment_id:
        appointment = repositories.appointments.get(appointment_id)
        if appointment is None:
            raise ValidationError('Appointment not found')
        if appointment.patient_id != patient.pk:
            raise ValidationError('Appointment belongs to a different patient')
    _check_referral(outcome, fields)
    _check_follow_up(outcome, fields.get('follow_up_date'))

    with transaction.atomic():
        consultation = repositories.consultations.create(
            patient=patient, doctor=doctor, appointment=appointment, symptoms=symptoms,
            diagnosis=diagnosis, outcome=outcome, **fields,
        )
        record_audit(
            user=actor, action=AuditAction.CREATE, entity_type='Consultation', entity_id=consultation.pk,
            description=f'Consultation for {patient.patient_number}', new_value={'outcome': outcome},
            request=request,
        )
    logger.info('consultation %s created patient=%s outcome=%s', consultation.pk, patient.pk, outcome)
    return repositories.consultations.get(consultation.pk)


def list_consultations(*, patient_id=None, doctor_id=None, page=1, limit=None):
    filters = {'patient_id': patient_id, 'doctor_id': doctor_id}
    return repositories.consultations.list(filters=filters, page=page, limit=limit)


def get_consultation(consultation_id):
    return repositories.consultations.get_or_404(consultation_id)


def update_consultation(actor, consultation_id, *, request=None, **fields):
    consultation = get_consultation(consultation_id)
    if 'outcome' in fields:
        if fields.pop('outcome') != consultation.outcome:
            raise ValidationError('Consultation outcome cannot be changed')
    if 'symptoms' in fields and not fields['symptoms']:
        raise ValidationError('At least one symptom is required')
    _check_referral(consultation.outcome, {
        'referred_department_id': fields.get('referred_department_id', consultation.referred_department_id),
        'referred_doctor_id': fields.get('referred_doctor_id'),
    })
    if 'follow_up_date' in fields:
        _check_follow_up(consultation.outcome, fields['follow_up_date'])
    old = {k: getattr(consultation, k) for k in fields}
    for key, value in fields.items():
        setattr(consultation, key, value)
    repositories.consultations.save(consultation, fields.keys())
    record_audit(
        user=actor, action=AuditAction.UPDATE, entity_type='Consultation', entity_id=consultation.pk,
        description='Updated consultation', old_value=old, new_value=fields, request=request,
    )
    return repositories.consultations.get(consultation.pk)


def delete_consultation(actor, consultation_id, *, request=None):
    consultation = get_consultation(consultation_id)
    snapshot = {'patientId': consultation.patient_id, 'diagnosis': consultation.diagnosis,
                'outcome': consultation.outcome}
    pk = consultation.pk
    consultation.delete()
    record_audit(
        user=actor, action=AuditAction.DELETE, entity_type='Consultation', entity_id=pk,
        description='Deleted consultation', old_value=snapshot, request=request,
    )
    logger.info('consultation %s deleted by=%s', pk, getattr(actor, 'pk', None))


def schedule_follow_up(actor, consultation_id, *, time_slot=None, request=None):
    """Book a FOLLOW_UP appointment on the consultation's follow-up date."""
    consultation = get_consultation(consultation_id)
    if not consultation.follow_up_date:
        raise ValidationError('Consultation has no follow-up date')
    if not time_slot:
        free = appointment_service.available_slots(consultation.doctor_id, consultation.follow_up_date)
        if not free:
            raise ConflictError('No available slots on the follow-up date')
        time_slot = free[0]
    return appointment_service.create_appointment(
        actor,
        patient_id=consultation.patient_id,
        doctor_id=consultation.doctor_id,
        appointment_date=consultation.follow_up_date,
        time_slot=time_slot,
        type=AppointmentType.FOLLOW_UP,
        reason_for_visit=f'Follow-up: {consultation.diagnosis}'[:500],
        request=request,
    )
