import logging

from django.db import transaction

from .. import repositories, sequences
from ..models import AuditAction
from .audit import record_audit

logger = logging.getLogger(__name__)


def register_patient(actor, *, request=None, **fields):
    with transaction.atomic():
        number = sequences.next_number(sequences.PATIENT)
        patient = repositories.patients.create(patient_number=number, **fields)
        record_audit(
            user=actor, action=AuditAction.CREATE, entity_type='Patient', entity_id=patient.pk,
            description=f'Registered patient {number}', new_value={'patientId': number}, request=request,
        )
    logger.info('patient registered %s by=%s', number, getattr(actor, 'pk', None))
    return patient


def get_patient(patient_id, *, include_inactive=False):
    return repositories.patients.get_or_404(patient_id, include_inactive=include_inactive)


def search_patients(*, q=None, page=1, limit=20):
    return repositories.patients.list(queryset=repositories.patients.search(q), page=page, limit=limit)


def update_patient(actor, patient_id, *, request=None, **fields):
    patient = get_patient(patient_id)
    old = {k: getattr(patient, k) for k in fields}
    for key, value in fields.items():
        setattr(patient, key, value)
    repositories.patients.save(patient, fields.keys())
    record_audit(
        user=actor, action=AuditAction.UPDATE, entity_type='Patient', entity_id=patient.pk,
        description=f'Updated patient {patient.patient_number}', old_value=old, new_value=fields,
        request=request,
    )
    return patient


def deactivate_patient(actor, patient_id, *, request=None):
    patient = repositories.patients.get_or_404(
        patient_id, include_inactive=False, message='Patient not found or already deactivated'
    )
    patient.is_active = False
    repositories.patients.save(patient, ['is_active'])
    record_audit(
        user=actor, action=AuditAction.DELETE, entity_type='Patient', entity_id=patient.pk,
        description=f'Deactivated patient {patient.patient_number}', request=request,
    )
    logger.info('patient deactivated %s', patient.patient_number)
    return patient


def has_active_admission(patient) -> bool:
    return repositories.admissions.patient_has_active(patient)


def patient_history(patient_id):
    """Appointments, consultations, prescriptions and admissions of a patient."""
    patient = get_patient(patient_id, include_inactive=True)
    return {
        'patient': patient,
        'appointments': list(repositories.appointments.for_patient(patient)),
        'consultations': list(repositories.consultations.filter(patient=patient)),
        'prescriptions': list(repositories.prescriptions.for_patient(patient)),
        'admissions': list(repositories.admissions.for_patient(patient)),
    }
