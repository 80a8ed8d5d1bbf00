import re

from rest_framework import serializers

from ..models import AppointmentType
from .common import CleanCharField, iso, patient_brief, user_brief

TIME_SLOT_PATTERN = r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$'
TIME_SLOT_ERRORS = {'invalid': 'Invalid time format, Use HH:MM format'}


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    departmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    appointmentDate = serializers.DateField()
    timeSlot = serializers.RegexField(TIME_SLOT_PATTERN, error_messages=TIME_SLOT_ERRORS)
    type = serializers.ChoiceField(choices=AppointmentType.choices, required=False, default=AppointmentType.NORMAL)
    reasonForVisit = CleanCharField(max_length=500, required=False, allow_blank=True, default='')
    notes = CleanCharField(max_length=500, required=False, allow_blank=True, default='')


class AppointmentUpdateSerializer(serializers.Serializer):
    appointmentDate = serializers.DateField(required=False)
    timeSlot = serializers.RegexField(TIME_SLOT_PATTERN, required=False, error_messages=TIME_SLOT_ERRORS)
    type = serializers.ChoiceField(choices=AppointmentType.choices, required=False)
    reasonForVisit = CleanCharField(max_length=500, required=False, allow_blank=True)
    notes = CleanCharField(max_length=500, required=False, allow_blank=True)
    status = serializers.CharField(required=False)

    FIELD_MAP = {
        'appointmentDate': 'appointment_date',
        'timeSlot': 'time_slot',
        'type': 'type',
        'reasonForVisit': 'reason_for_visit',
        'notes': 'notes',
        'status': 'status',
    }

    def model_fields(self) -> dict:
        return {self.FIELD_MAP[k]: v for k, v in self.validated_data.items()}


class CancelSerializer(serializers.Serializer):
    reason = CleanCharField(max_length=300, required=False, allow_blank=True)


class DoctorDayQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class DoctorSlotsQuerySerializer(DoctorDayQuerySerializer):
    """``slots`` is an optional comma-separated working-hours grid, e.g. ``09:00,09:30``."""
    slots = serializers.CharField(required=False)

    def validate_slots(self, value):
        slots = [s.strip() for s in value.split(',') if s.strip()]
        if not slots or not all(re.match(TIME_SLOT_PATTERN, s) for s in slots):
            raise serializers.ValidationError(TIME_SLOT_ERRORS['invalid'])
        return slots


def appointment_data(appointment):
    return {
        'id': appointment.id,
        'appointmentId': appointment.appointment_number,
        'patient': patient_brief(appointment.patient),
        'doctor': user_brief(appointment.doctor),
        'departmentId': appointment.department_id,
        'appointmentDate': iso(appointment.appointment_date),
        'timeSlot': appointment.time_slot,
        'type': appointment.type,
        'status': appointment.status,
        'reasonForVisit': appointment.reason_for_visit,
        'notes': appointment.notes,
        'cancellationReason': appointment.cancellation_reason or None,
        'cancelledAt': iso(appointment.cancelled_at),
        'cancelledBy': appointment.cancelled_by_id,
        'isToday': appointment.is_today,
        'isUpcoming': appointment.is_upcoming,
        'createdAt': iso(appointment.created_at),
    }
