"""
Consultation endpoints.

Doctors and nurses record consultations; pharmacy and administrators can
read them.  Only the doctor role edits, and only an administrator may
delete one.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import IsDoctor, method_roles
from ..serializers.appointments import appointment_data
from ..serializers.common import paginated
from ..serializers.consultations import (
    ConsultationCreateSerializer,
    ConsultationListQuerySerializer,
    ConsultationUpdateSerializer,
    FollowUpSerializer,
    consultation_data,
)
from ..services import consultations as consultation_service
from .common import created, ok, validated

READERS = (Role.DOCTOR, Role.NURSE, Role.PHARMACY, Role.ADMIN)

ConsultationAccess = method_roles(
    GET=READERS,
    POST=(Role.DOCTOR, Role.NURSE),
    PUT=(Role.DOCTOR,),
    DELETE=(Role.ADMIN,),
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ConsultationAccess])
def consultations(request):
    if request.method == 'GET':
        vd = validated(ConsultationListQuerySerializer, request.query_params).validated_data
        items, total = consultation_service.list_consultations(
            patient_id=vd.get('patientId'), doctor_id=vd.get('doctorId'),
            page=vd['page'], limit=vd.get('limit'),
        )
        return ok('Consultations fetched successfully',
                  paginated(items, total, vd['page'], vd.get('limit'), consultation_data))

    s = validated(ConsultationCreateSerializer, request.data)
    consultation = consultation_service.create_consultation(request.user, request=request, **s.to_service_kwargs())
    return created('Consultation created successfully', consultation_data(consultation))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ConsultationAccess])
def consultation_detail(request, consultation_id: int):
    if request.method == 'GET':
        consultation = consultation_service.get_consultation(consultation_id)
        return ok('Consultation fetched successfully', consultation_data(consultation))

    if request.method == 'PUT':
        s = validated(ConsultationUpdateSerializer, request.data)
        consultation = consultation_service.update_consultation(
            request.user, consultation_id, request=request, **s.model_fields(),
        )
        return ok('Consultation updated successfully', consultation_data(consultation))

    consultation_service.delete_consultation(request.user, consultation_id, request=request)
    return ok('Consultation deleted successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def follow_up(request, consultation_id: int):
    vd = validated(FollowUpSerializer, request.data).validated_data
    appointment = consultation_service.schedule_follow_up(
        request.user, consultation_id, time_slot=vd.get('timeSlot'), request=request,
    )
    return created('Follow-up appointment booked', appointment_data(appointment))
