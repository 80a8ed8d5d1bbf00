"""
Appointment endpoints.

Booking and rescheduling are open to all staff.  Moving an appointment
through its lifecycle (start, complete, no-show) is limited to the
clinical and front-desk roles; ``DELETE`` cancels rather than removes.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import roles
from ..serializers.appointments import (
    AppointmentCreateSerializer,
    AppointmentUpdateSerializer,
    CancelSerializer,
    DoctorDayQuerySerializer,
    DoctorSlotsQuerySerializer,
    appointment_data,
)
from ..services import appointments as appointment_service
from .common import created, ok, validated

CanMoveAppointment = roles(Role.DOCTOR, Role.NURSE, Role.FRONT_DESK, Role.ADMIN)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    vd = validated(AppointmentCreateSerializer, request.data).validated_data
    appointment = appointment_service.create_appointment(
        request.user,
        patient_id=vd['patientId'],
        doctor_id=vd['doctorId'],
        department_id=vd.get('departmentId'),
        appointment_date=vd['appointmentDate'],
        time_slot=vd['timeSlot'],
        type=vd['type'],
        reason_for_visit=vd['reasonForVisit'],
        notes=vd['notes'],
        request=request,
    )
    return created('Appointment booked successfully', appointment_data(appointment))


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id: int):
    if request.method == 'PUT':
        s = validated(AppointmentUpdateSerializer, request.data)
        appointment = appointment_service.update_appointment(
            request.user, appointment_id, request=request, **s.model_fields(),
        )
        return ok('Appointment updated successfully', appointment_data(appointment))

    vd = validated(CancelSerializer, request.data).validated_data
    reason = vd.get('reason') or request.query_params.get('reason')
    appointment = appointment_service.cancel_appointment(request.user, appointment_id, reason=reason, request=request)
    return ok('Appointment cancelled successfully', appointment_data(appointment))


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanMoveAppointment])
def start_appointment(request, appointment_id: int):
    appointment = appointment_service.start_appointment(request.user, appointment_id, request=request)
    return ok('Appointment started', appointment_data(appointment))


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanMoveAppointment])
def complete_appointment(request, appointment_id: int):
    appointment = appointment_service.complete_appointment(request.user, appointment_id, request=request)
    return ok('Appointment completed', appointment_data(appointment))


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanMoveAppointment])
def no_show(request, appointment_id: int):
    appointment = appointment_service.mark_no_show(request.user, appointment_id, request=request)
    return ok('Appointment marked as no-show', appointment_data(appointment))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctor_appointments(request, doctor_id: int):
    vd = validated(DoctorDayQuerySerializer, request.query_params).validated_data
    items = appointment_service.doctor_appointments(doctor_id, vd.get('date'))
    return ok('Appointments fetched successfully', [appointment_data(a) for a in items])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_slots(request, doctor_id: int):
    vd = validated(DoctorSlotsQuerySerializer, request.query_params).validated_data
    day = vd.get('date') or timezone.localdate()
    slots = appointment_service.available_slots(doctor_id, day, vd.get('slots'))
    return ok('Available slots fetched successfully', {'date': day.isoformat(), 'slots': slots})
