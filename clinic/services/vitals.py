import logging

from .. import repositories
from ..exceptions import ConflictError, ValidationError
from ..models import AdmissionStatus, AuditAction
from .audit import record_audit

logger = logging.getLogger(__name__)

MEASUREMENTS = (
    'temperature', 'systolic', 'diastolic', 'pulse', 'respiratory_rate',
    'oxygen_saturation', 'blood_glucose', 'weight', 'height',
)

# query parameter -> model field; blood pressure is reported as "sys/dia"
TREND_FIELDS = {
    'temperature': 'temperature',
    'pulse': 'pulse',
    'respiratoryRate': 'respiratory_rate',
    'oxygenSaturation': 'oxygen_saturation',
    'bloodGlucose': 'blood_glucose',
    'weight': 'weight',
    'bloodPressure': 'systolic',
}


def record_vitals(actor, admission_id, *, notes='', recorded_at=None, request=None, **measurements):
    admission = repositories.admissions.get_or_404(admission_id)
    if admission.status != AdmissionStatus.ACTIVE:
        raise ConflictError('Vital signs can only be recorded for an active admission')
    values = {k: v for k, v in measurements.items() if k in MEASUREMENTS and v is not None}
    if not values:
        raise ValidationError('At least one measurement is required')
    if ('systolic' in values) != ('diastolic' in values):
        raise ValidationError('Blood pressure needs both systolic and diastolic values')
    extra = {'recorded_at': recorded_at} if recorded_at else {}
    vital = repositories.vitals.create(
        admission=admission, recorded_by=actor, notes=notes or '', **values, **extra,
    )
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='VitalSigns', entity_id=vital.pk,
        description=f'Vitals for {admission.admission_number}', new_value=values, request=request,
    )
    logger.info('vitals recorded admission=%s fields=%s', admission.pk, sorted(values))
    return vital


def list_vitals(admission_id):
    admission = repositories.admissions.get_or_404(admission_id)
    return list(repositories.vitals.for_admission(admission))


def vital_trend(admission_id, vital: str, hours: int = 24) -> list[dict]:
    field = TREND_FIELDS.get(vital)
    if field is None:
        raise ValidationError(f'Unknown vital sign: {vital}')
    if hours < 1:
        raise ValidationError('Hours must be at least 1')
    admission = repositories.admissions.get_or_404(admission_id)
    points = []
    for reading in repositories.vitals.trend(admission, field, hours):
        value = reading.blood_pressure if vital == 'bloodPressure' else getattr(reading, field)
        points.append({'recordedAt': reading.recorded_at.isoformat(), 'value': value})
    return points
