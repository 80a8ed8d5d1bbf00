"""
Patient registry endpoints.

Registration, edits and deactivation belong to the front desk (and
administrators); every staff role can look patients up.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import method_roles
from ..serializers.appointments import appointment_data
from ..serializers.common import paginated
from ..serializers.consultations import consultation_data
from ..serializers.patients import (
    PatientCreateSerializer,
    PatientListQuerySerializer,
    patient_data,
    to_model_fields,
)
from ..serializers.prescriptions import prescription_data
from ..serializers.wards import admission_data
from ..services import patients as patient_service
from .common import created, ok, validated

FRONT_DESK_WRITES = method_roles(
    POST=(Role.FRONT_DESK, Role.ADMIN),
    PUT=(Role.FRONT_DESK, Role.ADMIN),
    DELETE=(Role.FRONT_DESK, Role.ADMIN),
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, FRONT_DESK_WRITES])
def patients(request):
    if request.method == 'GET':
        vd = validated(PatientListQuerySerializer, request.query_params).validated_data
        items, total = patient_service.search_patients(q=vd.get('q'), page=vd['page'], limit=vd['limit'])
        return ok('Patients fetched successfully', paginated(items, total, vd['page'], vd['limit'], patient_data))

    s = validated(PatientCreateSerializer, request.data)
    patient = patient_service.register_patient(request.user, request=request, **to_model_fields(s.validated_data))
    return created('Patient registered successfully', patient_data(patient))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, FRONT_DESK_WRITES])
def patient_detail(request, patient_id: int):
    if request.method == 'GET':
        patient = patient_service.get_patient(patient_id)
        return ok('Patient fetched successfully', patient_data(
            patient, has_active_admission=patient_service.has_active_admission(patient),
        ))

    if request.method == 'PUT':
        s = PatientCreateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        patient = patient_service.update_patient(
            request.user, patient_id, request=request, **to_model_fields(s.validated_data),
        )
        return ok('Patient updated successfully', patient_data(patient))

    patient_service.deactivate_patient(request.user, patient_id, request=request)
    return ok('Patient deactivated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_history(request, patient_id: int):
    history = patient_service.patient_history(patient_id)
    return ok('Patient history fetched successfully', {
        'patient': patient_data(history['patient']),
        'appointments': [appointment_data(a) for a in history['appointments']],
        'consultations': [consultation_data(c) for c in history['consultations']],
        'prescriptions': [prescription_data(p) for p in history['prescriptions']],
        'admissions': [admission_data(a) for a in history['admissions']],
    })
