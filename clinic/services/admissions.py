"""
Admissions and bed occupancy.

A bed is OCCUPIED exactly while one ACTIVE admission points at it.  The
admission row and the bed status change are written in the same
transaction, with the bed row locked, so neither can land without the
other.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from .. import repositories, sequences
from ..exceptions import ConflictError, ValidationError
from ..lifecycle import ADMISSION_TRANSITIONS, ensure_transition
from ..models import AdmissionStatus, AdmissionType, AuditAction, BedStatus
from .audit import record_audit

logger = logging.getLogger(__name__)

ALREADY_ADMITTED = 'Patient already has an active admission'


def _occupy_bed(bed_id, ward):
    bed = repositories.beds.get(bed_id, lock=True)
    if bed is None:
        raise ValidationError('Bed not found')
    if bed.ward_id != ward.pk:
        raise ValidationError('Bed does not belong to this ward')
    if bed.status != BedStatus.AVAILABLE:
        raise ConflictError(f'Bed {bed.bed_number} is not available')
    bed.status = BedStatus.OCCUPIED
    repositories.beds.save(bed, ['status'])
    return bed


def _release_bed(bed_id):
    if not bed_id:
        return
    bed = repositories.beds.get(bed_id, lock=True)
    if bed is not None and bed.status == BedStatus.OCCUPIED:
        bed.status = BedStatus.AVAILABLE
        repositories.beds.save(bed, ['status'])


def open_admission(actor, *, patient, doctor, ward, bed_id, admission_type, reason='',
                   expected_discharge_date=None, transferred_from=None, request=None):
    """Create an ACTIVE admission; caller holds the transaction."""
    if repositories.admissions.patient_has_active(patient):
        raise ConflictError(ALREADY_ADMITTED)
    bed = _occupy_bed(bed_id, ward) if bed_id else None
    number = sequences.next_number(sequences.ADMISSION)
    admission = repositories.admissions.create(
        admission_number=number, patient=patient, doctor=doctor, ward=ward, bed=bed,
        admission_type=admission_type, admission_reason=reason or '',
        expected_discharge_date=expected_discharge_date, transferred_from=transferred_from,
    )
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='Admission', entity_id=admission.pk,
        description=f'{admission_type} admission {number} for {patient.patient_number}',
        new_value={'wardId': ward.pk, 'bedId': getattr(bed, 'pk', None)}, request=request,
    )
    logger.info('admission %s opened patient=%s ward=%s bed=%s', number, patient.pk, ward.pk, bed_id)
    return admission


def resolve_parties(patient_id, doctor_id, ward_id):
    patient = repositories.patients.get(patient_id, include_inactive=False)
    if patient is None:
        raise ValidationError('Patient not found')
    doctor = repositories.users.active_doctor(doctor_id)
    if doctor is None:
        raise ValidationError('Doctor not found')
    ward = repositories.wards.get(ward_id, include_inactive=False)
    if ward is None:
        raise ValidationError('Ward not found')
    return patient, doctor, ward


def admit(actor, *, patient_id, doctor_id, ward_id, bed_id=None, admission_type=AdmissionType.NORMAL,
          reason='', expected_discharge_date=None, request=None):
    patient, doctor, ward = resolve_parties(patient_id, doctor_id, ward_id)
    if expected_discharge_date and expected_discharge_date < timezone.localdate():
        raise ValidationError('Expected discharge date cannot be in the past')
    try:
        with transaction.atomic():
            admission = open_admission(
                actor, patient=patient, doctor=doctor, ward=ward, bed_id=bed_id,
                admission_type=admission_type, reason=reason,
                expected_discharge_date=expected_discharge_date, request=request,
            )
    except IntegrityError:
        raise ConflictError('Bed or patient already has an active admission')
    return repositories.admissions.get(admission.pk)


def get_admission(admission_id):
    return repositories.admissions.get_or_404(admission_id)


def list_admissions(*, status=None, ward_id=None, patient_id=None, page=1, limit=None):
    filters = {'status': status, 'ward_id': ward_id, 'patient_id': patient_id}
    return repositories.admissions.list(filters=filters, page=page, limit=limit)


def discharge(actor, admission_id, *, summary='', request=None):
    with transaction.atomic():
        admission = repositories.admissions.get_or_404(admission_id, lock=True)
        ensure_transition(ADMISSION_TRANSITIONS, 'Admission', admission.status, AdmissionStatus.DISCHARGED)
        admission.status = AdmissionStatus.DISCHARGED
        admission.discharge_date = timezone.now()
        admission.discharge_summary = summary or ''
        repositories.admissions.save(admission, ['status', 'discharge_date', 'discharge_summary'])
        _release_bed(admission.bed_id)
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='Admission', entity_id=admission.pk,
            description=f'Discharged {admission.admission_number}',
            old_value={'status': AdmissionStatus.ACTIVE}, new_value={'status': AdmissionStatus.DISCHARGED},
            request=request,
        )
    logger.info('admission %s discharged, bed %s released', admission.admission_number, admission.bed_id)
    return repositories.admissions.get(admission.pk)


def transfer(actor, admission_id, *, ward_id, bed_id=None, doctor_id=None, reason='', request=None):
    """Close the current admission as TRANSFERRED and open a TRANSFER one."""
    ward = repositories.wards.get(ward_id, include_inactive=False)
    if ward is None:
        raise ValidationError('Ward not found')
    try:
        with transaction.atomic():
            current = repositories.admissions.get_or_404(admission_id, lock=True)
            ensure_transition(ADMISSION_TRANSITIONS, 'Admission', current.status, AdmissionStatus.TRANSFERRED)
            if bed_id and bed_id == current.bed_id:
                raise ValidationError('Patient already occupies this bed')
            doctor = current.doctor
            if doctor_id:
                doctor = repositories.users.active_doctor(doctor_id)
                if doctor is None:
                    raise ValidationError('Doctor not found')

            current.status = AdmissionStatus.TRANSFERRED
            current.discharge_date = timezone.now()
            current.discharge_summary = reason or ''
            repositories.admissions.save(current, ['status', 'discharge_date', 'discharge_summary'])
            _release_bed(current.bed_id)

            admission = open_admission(
                actor, patient=current.patient, doctor=doctor, ward=ward, bed_id=bed_id,
                admission_type=AdmissionType.TRANSFER, reason=reason,
                expected_discharge_date=current.expected_discharge_date,
                transferred_from=current, request=request,
            )
    except IntegrityError:
        raise ConflictError('Bed already has an active admission')
    logger.info('admission %s transferred to %s', current.admission_number, admission.admission_number)
    return repositories.admissions.get(admission.pk)
