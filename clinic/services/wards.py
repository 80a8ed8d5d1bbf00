import logging

from django.db import transaction
from django.utils import timezone

from .. import repositories
from ..exceptions import ConflictError, ValidationError
from ..models import AuditAction, BedStatus, WardType
from .audit import record_audit

logger = logging.getLogger(__name__)


def create_ward(actor, *, name, ward_type, capacity, floor=None, department_id=None, request=None):
    name = (name or '').strip()
    if repositories.wards.all().filter(name__iexact=name).exists():
        raise ConflictError('Ward name already exists')
    department = None
    if department_id:
        department = repositories.departments.get(department_id, include_inactive=False)
        if department is None:
            raise ValidationError('Department not found')
    ward = repositories.wards.create(
        name=name, ward_type=ward_type, capacity=capacity, floor=floor, department=department,
    )
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='Ward', entity_id=ward.pk,
        description=f'Created ward {name}', new_value={'wardType': ward_type, 'capacity': capacity},
        request=request,
    )
    logger.info('ward created id=%s type=%s capacity=%s', ward.pk, ward_type, capacity)
    return ward


def list_wards(*, ward_type=None):
    qs = repositories.wards.with_bed_counts()
    if ward_type:
        qs = qs.filter(ward_type=ward_type)
    return list(qs)


def get_ward(ward_id):
    return repositories.wards.get_or_404(ward_id, include_inactive=False)


def available_beds(ward_type):
    """Active wards of ``ward_type`` that still have at least one free bed."""
    ward_type = (ward_type or '').strip().upper()
    if not ward_type:
        raise ValidationError('Ward Type is required')
    if ward_type not in WardType.values:
        raise ValidationError(f'{ward_type} is not a valid ward type')
    return list(repositories.wards.with_available_beds(ward_type))


def add_bed(actor, ward_id, *, bed_number, features=None, request=None):
    with transaction.atomic():
        ward = repositories.wards.get_or_404(ward_id, lock=True, include_inactive=False)
        if repositories.beds.count(ward=ward) >= ward.capacity:
            raise ConflictError('Ward is at full capacity')
        bed_number = bed_number.strip()
        if repositories.beds.exists(ward=ward, bed_number=bed_number):
            raise ConflictError('Bed number already exists in this ward')
        bed = repositories.beds.create(ward=ward, bed_number=bed_number, features=features or [])
        record_audit(
            user=actor, action=AuditAction.CREATE, entity_type='Bed', entity_id=bed.pk,
            description=f'Added bed {bed_number} to {ward.name}', request=request,
        )
    return repositories.beds.get(bed.pk)


def ward_beds(ward_id, *, status=None):
    ward = get_ward(ward_id)
    qs = repositories.beds.for_ward(ward)
    if status:
        qs = qs.filter(status=status)
    return list(qs)


def set_bed_status(actor, bed_id, status, *, request=None):
    """Manual status changes; occupancy itself only follows admissions."""
    if status == BedStatus.OCCUPIED:
        raise ValidationError('Bed occupancy is managed through admissions')
    with transaction.atomic():
        bed = repositories.beds.get_or_404(bed_id, lock=True)
        if bed.status == BedStatus.OCCUPIED:
            raise ConflictError('Bed is occupied by an active admission')
        old_status = bed.status
        bed.status = status
        fields = ['status']
        if status == BedStatus.MAINTENANCE:
            bed.last_maintenance = timezone.now()
            fields.append('last_maintenance')
        repositories.beds.save(bed, fields)
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='Bed', entity_id=bed.pk,
            description=f'Bed {bed.bed_number} {old_status} -> {status}',
            old_value={'status': old_status}, new_value={'status': status}, request=request,
        )
    logger.info('bed %s %s -> %s', bed.pk, old_status, status)
    return repositories.beds.get(bed.pk)


def ward_admissions(ward_id):
    ward = get_ward(ward_id)
    return list(repositories.admissions.active_for_ward(ward))
