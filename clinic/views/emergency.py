"""
Emergency triage endpoints.

Any staff member can register a case as it arrives.  Identifying,
admitting and closing a case is left to doctors, nurses and
administrators.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsCareTeam
from ..serializers.emergency import (
    EmergencyAdmitSerializer,
    EmergencyCreateSerializer,
    IdentifySerializer,
    ResolveSerializer,
    emergency_data,
)
from ..services import emergency as emergency_service
from .common import created, ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def emergency_cases(request):
    if request.method == 'GET':
        return ok('Active emergency cases fetched successfully',
                  [emergency_data(c) for c in emergency_service.active_cases()])

    s = validated(EmergencyCreateSerializer, request.data)
    case = emergency_service.register_case(request.user, request=request, **s.to_service_kwargs())
    return created('Emergency case registered successfully', emergency_data(case))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def critical_cases(request):
    return ok('Critical cases fetched successfully',
              [emergency_data(c) for c in emergency_service.critical_cases()])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def case_detail(request, case_id: int):
    return ok('Emergency case fetched successfully', emergency_data(emergency_service.get_case(case_id)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCareTeam])
def identify(request, case_id: int):
    vd = validated(IdentifySerializer, request.data).validated_data
    case = emergency_service.identify(request.user, case_id, patient_id=vd['patientId'], request=request)
    return ok('Patient identified', emergency_data(case))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCareTeam])
def admit(request, case_id: int):
    vd = validated(EmergencyAdmitSerializer, request.data).validated_data
    case = emergency_service.admit(
        request.user, case_id, doctor_id=vd['doctorId'], ward_id=vd['wardId'],
        bed_id=vd.get('bedId'), reason=vd['reason'], request=request,
    )
    return ok('Emergency patient admitted', emergency_data(case))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCareTeam])
def resolve(request, case_id: int):
    vd = validated(ResolveSerializer, request.data).validated_data
    case = emergency_service.resolve(
        request.user, case_id, status=vd['status'],
        referred_facility=vd['facilityName'], referral_reason=vd['reason'], request=request,
    )
    return ok('Emergency case closed', emergency_data(case))
