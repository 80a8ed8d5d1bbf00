"""
Admission and vital sign endpoints.

Doctors and administrators admit, discharge and transfer patients.
Nurses and doctors record vitals against an active admission.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import IsDoctorOrAdmin, method_roles
from ..serializers.common import paginated
from ..serializers.wards import (
    AdmissionCreateSerializer,
    AdmissionListQuerySerializer,
    DischargeSerializer,
    TransferSerializer,
    TrendQuerySerializer,
    VitalSignsSerializer,
    admission_data,
    vital_signs_data,
)
from ..services import admissions as admission_service
from ..services import vitals as vitals_service
from .common import created, ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, method_roles(POST=(Role.DOCTOR, Role.ADMIN))])
def admissions(request):
    if request.method == 'GET':
        vd = validated(AdmissionListQuerySerializer, request.query_params).validated_data
        items, total = admission_service.list_admissions(
            status=(vd.get('status') or '').upper() or None, ward_id=vd.get('wardId'),
            patient_id=vd.get('patientId'), page=vd['page'], limit=vd.get('limit'),
        )
        return ok('Admissions fetched successfully',
                  paginated(items, total, vd['page'], vd.get('limit'), admission_data))

    s = validated(AdmissionCreateSerializer, request.data)
    admission = admission_service.admit(request.user, request=request, **s.to_service_kwargs())
    return created('Patient admitted successfully', admission_data(admission))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admission_detail(request, admission_id: int):
    admission = admission_service.get_admission(admission_id)
    return ok('Admission fetched successfully', admission_data(admission))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def discharge(request, admission_id: int):
    vd = validated(DischargeSerializer, request.data).validated_data
    admission = admission_service.discharge(
        request.user, admission_id, summary=vd['dischargeSummary'], request=request,
    )
    return ok('Patient discharged successfully', admission_data(admission))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def transfer(request, admission_id: int):
    vd = validated(TransferSerializer, request.data).validated_data
    admission = admission_service.transfer(
        request.user, admission_id,
        ward_id=vd['wardId'], bed_id=vd.get('bedId'), doctor_id=vd.get('doctorId'),
        reason=vd['reason'], request=request,
    )
    return ok('Patient transferred successfully', admission_data(admission))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, method_roles(POST=(Role.NURSE, Role.DOCTOR))])
def vitals(request, admission_id: int):
    if request.method == 'GET':
        items = vitals_service.list_vitals(admission_id)
        return ok('Vital signs fetched successfully', [vital_signs_data(v) for v in items])

    s = validated(VitalSignsSerializer, request.data)
    vital = vitals_service.record_vitals(request.user, admission_id, request=request, **s.to_service_kwargs())
    return created('Vital signs recorded successfully', vital_signs_data(vital))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def vitals_trend(request, admission_id: int):
    vd = validated(TrendQuerySerializer, request.query_params).validated_data
    points = vitals_service.vital_trend(admission_id, vd['vital'], vd['hours'])
    return ok('Vital trend fetched successfully', {'vital': vd['vital'], 'hours': vd['hours'], 'points': points})
