"""
Emergency triage.

Cases arrive REGISTERED, possibly before the patient is known.  Active
cases are worked most severe first, then in arrival order.  Admitting a
case opens an EMERGENCY admission under the same rules as any other
admission.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from .. import repositories
from ..exceptions import ConflictError, ValidationError
from ..lifecycle import EMERGENCY_TERMINAL, EMERGENCY_TRANSITIONS, ensure_transition
from ..models import AdmissionType, AuditAction, EmergencyStatus
from .admissions import open_admission, resolve_parties
from .audit import record_audit

logger = logging.getLogger(__name__)


def register_case(actor, *, severity_level, triage_notes, temporary_patient_name='', patient_id=None,
                  chief_complaint='', vital_signs=None, request=None):
    patient = None
    if patient_id:
        patient = repositories.patients.get(patient_id, include_inactive=False)
        if patient is None:
            raise ValidationError('Patient not found')
    case = repositories.emergencies.create(
        severity_level=severity_level, triage_notes=triage_notes,
        temporary_patient_name=temporary_patient_name or '', patient=patient,
        chief_complaint=chief_complaint or '', vital_signs=vital_signs or {}, handled_by=actor,
    )
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='EmergencyCase', entity_id=case.pk,
        description=f'{severity_level} case registered', request=request,
    )
    logger.info('emergency case %s registered severity=%s', case.pk, severity_level)
    return repositories.emergencies.get(case.pk)


def get_case(case_id):
    return repositories.emergencies.get_or_404(case_id)


def active_cases():
    return list(repositories.emergencies.active())


def critical_cases():
    return list(repositories.emergencies.critical())


def identify(actor, case_id, *, patient_id, request=None):
    with transaction.atomic():
        case = repositories.emergencies.get_or_404(case_id, lock=True)
        if case.status in EMERGENCY_TERMINAL:
            raise ConflictError('Emergency case is already closed')
        patient = repositories.patients.get(patient_id, include_inactive=False)
        if patient is None:
            raise ValidationError('Patient not found')
        case.patient = patient
        repositories.emergencies.save(case, ['patient'])
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='EmergencyCase', entity_id=case.pk,
            description=f'Identified as {patient.patient_number}', request=request,
        )
    return repositories.emergencies.get(case.pk)


def admit(actor, case_id, *, doctor_id, ward_id, bed_id=None, reason='', request=None):
    try:
        with transaction.atomic():
            case = repositories.emergencies.get_or_404(case_id, lock=True)
            if not case.patient_id:
                raise ValidationError('Patient must be identified before admission')
            ensure_transition(EMERGENCY_TRANSITIONS, 'Emergency case', case.status, EmergencyStatus.ADMITTED)
            patient, doctor, ward = resolve_parties(case.patient_id, doctor_id, ward_id)
            admission = open_admission(
                actor, patient=patient, doctor=doctor, ward=ward, bed_id=bed_id,
                admission_type=AdmissionType.EMERGENCY,
                reason=reason or case.chief_complaint or case.triage_notes, request=request,
            )
            case.admission = admission
            case.status = EmergencyStatus.ADMITTED
            case.resolved_at = timezone.now()
            repositories.emergencies.save(case, ['admission', 'status', 'resolved_at'])
            record_audit(
                user=actor, action=AuditAction.UPDATE, entity_type='EmergencyCase', entity_id=case.pk,
                description=f'Admitted as {admission.admission_number}',
                old_value={'status': EmergencyStatus.REGISTERED},
                new_value={'status': EmergencyStatus.ADMITTED}, request=request,
            )
    except IntegrityError:
        raise ConflictError('Bed or patient already has an active admission')
    logger.info('emergency case %s admitted as %s', case.pk, admission.admission_number)
    return repositories.emergencies.get(case.pk)


def resolve(actor, case_id, *, status, referred_facility='', referral_reason='', request=None):
    if status not in EMERGENCY_TERMINAL:
        raise ValidationError(f'{status} is not a closing status')
    if status == EmergencyStatus.REFERRED and not (referred_facility or '').strip():
        raise ValidationError('Facility name is required for a referral')
    with transaction.atomic():
        case = repositories.emergencies.get_or_404(case_id, lock=True)
        old_status = case.status
        ensure_transition(EMERGENCY_TRANSITIONS, 'Emergency case', old_status, status)
        now = timezone.now()
        case.status = status
        case.resolved_at = now
        fields = ['status', 'resolved_at']
        if status == EmergencyStatus.REFERRED:
            case.referred_facility = referred_facility.strip()
            case.referral_reason = referral_reason or ''
            case.referred_at = now
            fields += ['referred_facility', 'referral_reason', 'referred_at']
        repositories.emergencies.save(case, fields)
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='EmergencyCase', entity_id=case.pk,
            description=f'{old_status} -> {status}', old_value={'status': old_status},
            new_value={'status': status}, request=request,
        )
    logger.info('emergency case %s %s -> %s', case.pk, old_status, status)
    return repositories.emergencies.get(case.pk)
