"""
Prescription endpoints.

A doctor writes the prescription, billing records payments against it
and pharmacy dispenses it once it is fully paid.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import IsBilling, IsBillingOrAdmin, IsDoctorOrAdmin, IsPharmacy, method_roles
from ..serializers.common import paginated
from ..serializers.prescriptions import (
    DispenseSerializer,
    PaymentSerializer,
    PrescriptionCreateSerializer,
    PrescriptionListQuerySerializer,
    prescription_data,
)
from ..services import prescriptions as prescription_service
from .common import created, ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, method_roles(GET=(Role.ADMIN, Role.PHARMACY), POST=(Role.DOCTOR,))])
def prescriptions(request):
    if request.method == 'GET':
        vd = validated(PrescriptionListQuerySerializer, request.query_params).validated_data
        items, total = prescription_service.list_prescriptions(
            status=vd.get('status'), payment_status=vd.get('paymentStatus'),
            patient_id=vd.get('patientId'), page=vd['page'], limit=vd.get('limit'),
        )
        return ok('Prescriptions fetched successfully',
                  paginated(items, total, vd['page'], vd.get('limit'), prescription_data))

    s = validated(PrescriptionCreateSerializer, request.data)
    prescription = prescription_service.create_prescription(request.user, request=request, **s.to_service_kwargs())
    return created('Prescription created successfully', prescription_data(prescription))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacy])
def pending(request):
    items = prescription_service.pending_prescriptions()
    return ok('Pending prescriptions fetched successfully', [prescription_data(p) for p in items])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBillingOrAdmin])
def unpaid(request):
    items = prescription_service.unpaid_prescriptions()
    return ok('Unpaid prescriptions fetched successfully', [prescription_data(p) for p in items])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def prescription_detail(request, prescription_id: int):
    prescription = prescription_service.get_prescription(prescription_id)
    return ok('Prescription fetched successfully', prescription_data(prescription))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsBilling])
def pay(request, prescription_id: int):
    vd = validated(PaymentSerializer, request.data).validated_data
    prescription = prescription_service.mark_paid(request.user, prescription_id, vd['amount'], request=request)
    return ok('Payment recorded successfully', prescription_data(prescription))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPharmacy])
def dispense(request, prescription_id: int):
    vd = validated(DispenseSerializer, request.data).validated_data
    prescription = prescription_service.dispense(
        request.user, prescription_id, allow_partial=vd['allowPartial'], request=request,
    )
    return ok('Prescription dispensed successfully', prescription_data(prescription))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def cancel(request, prescription_id: int):
    prescription = prescription_service.cancel(request.user, prescription_id, request=request)
    return ok('Prescription cancelled successfully', prescription_data(prescription))
