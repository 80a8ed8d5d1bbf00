from rest_framework import serializers

from ..models import AdmissionType, BedFeature, BedStatus, WardType
from .common import CleanCharField, iso, patient_brief, user_brief


class WardCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=100)
    wardType = serializers.ChoiceField(choices=WardType.choices)
    capacity = serializers.IntegerField(min_value=1)
    floor = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    departmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def to_internal_value(self, data):
        if isinstance(data, dict) and isinstance(data.get('wardType'), str):
            data = {**data, 'wardType': data['wardType'].strip().upper()}
        return super().to_internal_value(data)


class BedCreateSerializer(serializers.Serializer):
    bedNumber = CleanCharField(max_length=20)
    features = serializers.ListField(
        child=serializers.ChoiceField(choices=BedFeature.choices), required=False, default=list
    )


class BedStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BedStatus.choices)


class AvailableBedsQuerySerializer(serializers.Serializer):
    wardType = serializers.CharField(required=False, allow_blank=True)


class AdmissionCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    wardId = serializers.IntegerField(min_value=1)
    bedId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    admissionType = serializers.ChoiceField(
        choices=[AdmissionType.NORMAL, AdmissionType.EMERGENCY], required=False, default=AdmissionType.NORMAL
    )
    admissionReason = CleanCharField(max_length=1000, required=False, allow_blank=True, default='')
    expectedDischargeDate = serializers.DateField(required=False, allow_null=True)

    def to_service_kwargs(self) -> dict:
        vd = self.validated_data
        return {
            'patient_id': vd['patientId'],
            'doctor_id': vd['doctorId'],
            'ward_id': vd['wardId'],
            'bed_id': vd.get('bedId'),
            'admission_type': vd['admissionType'],
            'reason': vd['admissionReason'],
            'expected_discharge_date': vd.get('expectedDischargeDate'),
        }


class DischargeSerializer(serializers.Serializer):
    dischargeSummary = CleanCharField(max_length=5000, required=False, allow_blank=True, default='')


class TransferSerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1)
    bedId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    doctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    reason = CleanCharField(max_length=1000, required=False, allow_blank=True, default='')


class AdmissionListQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    wardId = serializers.IntegerField(min_value=1, required=False)
    patientId = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class VitalSignsSerializer(serializers.Serializer):
    temperature = serializers.FloatField(min_value=30, max_value=45, required=False, allow_null=True)
    systolic = serializers.IntegerField(min_value=0, max_value=400, required=False, allow_null=True)
    diastolic = serializers.IntegerField(min_value=0, max_value=300, required=False, allow_null=True)
    pulse = serializers.IntegerField(min_value=0, max_value=300, required=False, allow_null=True)
    respiratoryRate = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
    oxygenSaturation = serializers.FloatField(min_value=0, max_value=100, required=False, allow_null=True)
    bloodGlucose = serializers.FloatField(min_value=0, required=False, allow_null=True)
    weight = serializers.FloatField(min_value=0, required=False, allow_null=True)
    height = serializers.FloatField(min_value=0, required=False, allow_null=True)
    notes = CleanCharField(max_length=1000, required=False, allow_blank=True, default='')
    recordedAt = serializers.DateTimeField(required=False, allow_null=True)

    FIELD_MAP = {
        'temperature': 'temperature',
        'systolic': 'systolic',
        'diastolic': 'diastolic',
        'pulse': 'pulse',
        'respiratoryRate': 'respiratory_rate',
        'oxygenSaturation': 'oxygen_saturation',
        'bloodGlucose': 'blood_glucose',
        'weight': 'weight',
        'height': 'height',
        'notes': 'notes',
        'recordedAt': 'recorded_at',
    }

    def to_service_kwargs(self) -> dict:
        return {self.FIELD_MAP[k]: v for k, v in self.validated_data.items()}


class TrendQuerySerializer(serializers.Serializer):
    vital = serializers.CharField(max_length=32)
    hours = serializers.IntegerField(min_value=1, max_value=24 * 30, required=False, default=24)


def ward_data(ward):
    data = {
        'id': ward.id,
        'name': ward.name,
        'wardType': ward.ward_type,
        'capacity': ward.capacity,
        'floor': ward.floor,
        'departmentId': ward.department_id,
        'isActive': ward.is_active,
    }
    if hasattr(ward, 'available_beds'):
        data['availableBeds'] = ward.available_beds
        data['totalBeds'] = ward.total_beds
    return data


def available_ward_data(ward):
    return {
        'wardId': ward.id,
        'name': ward.name,
        'wardType': ward.ward_type,
        'availableBeds': ward.available_beds,
    }


def bed_data(bed):
    return {
        'id': bed.id,
        'wardId': bed.ward_id,
        'bedNumber': bed.bed_number,
        'status': bed.status,
        'features': bed.features,
        'lastMaintenance': iso(bed.last_maintenance),
    }


def admission_data(admission):
    return {
        'id': admission.id,
        'admissionNumber': admission.admission_number,
        'patient': patient_brief(admission.patient),
        'doctor': user_brief(admission.doctor),
        'wardId': admission.ward_id,
        'bedId': admission.bed_id,
        'admissionType': admission.admission_type,
        'status': admission.status,
        'admissionReason': admission.admission_reason,
        'admissionDate': iso(admission.admission_date),
        'expectedDischargeDate': iso(admission.expected_discharge_date),
        'dischargeDate': iso(admission.discharge_date),
        'dischargeSummary': admission.discharge_summary or None,
        'transferredFrom': admission.transferred_from_id,
        'lengthOfStay': admission.length_of_stay,
    }


def vital_signs_data(vital):
    return {
        'id': vital.id,
        'admissionId': vital.admission_id,
        'recordedBy': user_brief(vital.recorded_by),
        'temperature': vital.temperature,
        'bloodPressure': vital.blood_pressure,
        'systolic': vital.systolic,
        'diastolic': vital.diastolic,
        'pulse': vital.pulse,
        'respiratoryRate': vital.respiratory_rate,
        'oxygenSaturation': vital.oxygen_saturation,
        'bloodGlucose': vital.blood_glucose,
        'weight': vital.weight,
        'height': vital.height,
        'bmi': vital.bmi,
        'notes': vital.notes,
        'recordedAt': iso(vital.recorded_at),
    }
