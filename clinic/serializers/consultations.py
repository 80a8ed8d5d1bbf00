from rest_framework import serializers

from ..models import ConsultationOutcome
from .appointments import TIME_SLOT_ERRORS, TIME_SLOT_PATTERN
from .common import CleanCharField, CleanListField, iso, patient_brief, user_brief

FIELD_MAP = {
    'diagnosis': 'diagnosis',
    'notes': 'notes',
    'symptoms': 'symptoms',
    'labRequests': 'lab_requests',
    'outcome': 'outcome',
    'referredDepartmentId': 'referred_department_id',
    'referredDoctorId': 'referred_doctor_id',
    'referralReason': 'referral_reason',
    'followUpDate': 'follow_up_date',
}


class ConsultationCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    appointmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    diagnosis = CleanCharField(max_length=2000)
    notes = CleanCharField(max_length=2000, required=False, allow_blank=True)
    symptoms = CleanListField(allow_empty=False)
    labRequests = CleanListField(required=False)
    outcome = serializers.ChoiceField(choices=ConsultationOutcome.choices)
    referredDepartmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    referredDoctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    referralReason = CleanCharField(max_length=300, required=False, allow_blank=True)
    followUpDate = serializers.DateField(required=False, allow_null=True)

    def to_service_kwargs(self) -> dict:
        vd = dict(self.validated_data)
        kwargs = {
            'patient_id': vd.pop('patientId'),
            'doctor_id': vd.pop('doctorId', None),
            'appointment_id': vd.pop('appointmentId', None),
        }
        kwargs.update({FIELD_MAP[k]: v for k, v in vd.items()})
        return kwargs


class ConsultationUpdateSerializer(serializers.Serializer):
    diagnosis = CleanCharField(max_length=2000, required=False)
    notes = CleanCharField(max_length=2000, required=False, allow_blank=True)
    symptoms = CleanListField(required=False)
    labRequests = CleanListField(required=False)
    outcome = serializers.ChoiceField(choices=ConsultationOutcome.choices, required=False)
    referredDepartmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    referredDoctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    referralReason = CleanCharField(max_length=300, required=False, allow_blank=True)
    followUpDate = serializers.DateField(required=False, allow_null=True)

    def model_fields(self) -> dict:
        return {FIELD_MAP[k]: v for k, v in self.validated_data.items()}


class ConsultationListQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1, required=False)
    doctorId = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class FollowUpSerializer(serializers.Serializer):
    timeSlot = serializers.RegexField(TIME_SLOT_PATTERN, required=False, error_messages=TIME_SLOT_ERRORS)


def consultation_data(consultation):
    return {
        'id': consultation.id,
        'appointmentId': consultation.appointment_id,
        'patient': patient_brief(consultation.patient),
        'doctor': user_brief(consultation.doctor),
        'diagnosis': consultation.diagnosis,
        'notes': consultation.notes,
        'symptoms': consultation.symptoms,
        'labRequests': consultation.lab_requests,
        'outcome': consultation.outcome,
        'referredTo': {
            'departmentId': consultation.referred_department_id,
            'doctorId': consultation.referred_doctor_id,
            'reason': consultation.referral_reason,
        } if consultation.referred_department_id or consultation.referred_doctor_id else None,
        'followUpDate': iso(consultation.follow_up_date),
        'consultationDate': iso(consultation.consultation_date),
        'createdAt': iso(consultation.created_at),
    }
