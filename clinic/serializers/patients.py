from django.utils import timezone
from rest_framework import serializers

from ..models import BloodGroup, Gender
from .common import CleanCharField, CleanListField, iso


class PatientCreateSerializer(serializers.Serializer):
    firstName = CleanCharField(max_length=50)
    lastName = CleanCharField(max_length=50)
    dateOfBirth = serializers.DateField()
    gender = serializers.ChoiceField(choices=Gender.choices)
    phone = serializers.RegexField(r'^[0-9]{10,15}$', error_messages={'invalid': 'Please provide a valid phone number'})
    email = serializers.EmailField(required=False, allow_blank=True)
    address = CleanCharField(max_length=200, required=False, allow_blank=True)
    emergencyContactName = CleanCharField(max_length=100, required=False, allow_blank=True)
    emergencyContactPhone = serializers.RegexField(r'^[0-9]{10,15}$', required=False, allow_blank=True)
    emergencyContactRelation = CleanCharField(max_length=50, required=False, allow_blank=True)
    bloodGroup = serializers.ChoiceField(choices=BloodGroup.choices, required=False, allow_blank=True)
    allergies = CleanListField(required=False)
    cardIssued = serializers.BooleanField(required=False)

    def validate_firstName(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('First name must be at least 2 characters')
        return v

    def validate_dateOfBirth(self, v):
        if v > timezone.localdate():
            raise serializers.ValidationError('Date of birth cannot be in the future')
        return v


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)


FIELD_MAP = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'dateOfBirth': 'date_of_birth',
    'gender': 'gender',
    'phone': 'phone',
    'email': 'email',
    'address': 'address',
    'emergencyContactName': 'emergency_contact_name',
    'emergencyContactPhone': 'emergency_contact_phone',
    'emergencyContactRelation': 'emergency_contact_relation',
    'bloodGroup': 'blood_group',
    'allergies': 'allergies',
    'cardIssued': 'card_issued',
}


def to_model_fields(validated: dict) -> dict:
    return {FIELD_MAP[k]: v for k, v in validated.items() if k in FIELD_MAP}


def patient_data(patient, *, has_active_admission=None):
    data = {
        'id': patient.id,
        'patientId': patient.patient_number,
        'firstName': patient.first_name,
        'lastName': patient.last_name,
        'fullName': patient.full_name,
        'dateOfBirth': iso(patient.date_of_birth),
        'age': patient.age,
        'gender': patient.gender,
        'phone': patient.phone,
        'email': patient.email,
        'address': patient.address,
        'emergencyContact': {
            'name': patient.emergency_contact_name,
            'phone': patient.emergency_contact_phone,
            'relation': patient.emergency_contact_relation,
        },
        'bloodGroup': patient.blood_group or None,
        'allergies': patient.allergies,
        'cardIssued': patient.card_issued,
        'isActive': patient.is_active,
        'createdAt': iso(patient.created_at),
    }
    if has_active_admission is not None:
        data['hasActiveAdmission'] = has_active_admission
    return data
