from rest_framework import serializers

from ..models import EmergencyStatus, Severity
from .common import CleanCharField, iso, patient_brief, user_brief

CLOSING_STATUSES = [EmergencyStatus.DISCHARGED, EmergencyStatus.REFERRED, EmergencyStatus.DECEASED]


class EmergencyCreateSerializer(serializers.Serializer):
    severityLevel = serializers.ChoiceField(choices=Severity.choices)
    triageNotes = CleanCharField(max_length=2000)
    temporaryPatientName = CleanCharField(max_length=100, required=False, allow_blank=True, default='')
    patientId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    chiefComplaint = CleanCharField(max_length=500, required=False, allow_blank=True, default='')
    vitalSigns = serializers.DictField(required=False, default=dict)

    def to_internal_value(self, data):
        if isinstance(data, dict) and isinstance(data.get('severityLevel'), str):
            data = {**data, 'severityLevel': data['severityLevel'].strip().upper()}
        return super().to_internal_value(data)

    def to_service_kwargs(self) -> dict:
        vd = self.validated_data
        return {
            'severity_level': vd['severityLevel'],
            'triage_notes': vd['triageNotes'],
            'temporary_patient_name': vd['temporaryPatientName'],
            'patient_id': vd.get('patientId'),
            'chief_complaint': vd['chiefComplaint'],
            'vital_signs': vd['vitalSigns'],
        }


class IdentifySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)


class EmergencyAdmitSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    wardId = serializers.IntegerField(min_value=1)
    bedId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    reason = CleanCharField(max_length=1000, required=False, allow_blank=True, default='')


class ResolveSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CLOSING_STATUSES)
    facilityName = CleanCharField(max_length=200, required=False, allow_blank=True, default='')
    reason = CleanCharField(max_length=500, required=False, allow_blank=True, default='')


def emergency_data(case):
    return {
        'id': case.id,
        'displayName': case.display_name,
        'temporaryPatientName': case.temporary_patient_name or None,
        'patient': patient_brief(case.patient),
        'severityLevel': case.severity_level,
        'triageNotes': case.triage_notes,
        'chiefComplaint': case.chief_complaint,
        'vitalSigns': case.vital_signs,
        'status': case.status,
        'handledBy': user_brief(case.handled_by),
        'admissionId': case.admission_id,
        'referredTo': {
            'facilityName': case.referred_facility,
            'reason': case.referral_reason,
            'referredAt': iso(case.referred_at),
        } if case.referred_facility else None,
        'arrivedAt': iso(case.arrived_at),
        'resolvedAt': iso(case.resolved_at),
    }
