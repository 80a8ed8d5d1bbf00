"""
Ward and bed endpoints.

Administrators create wards and beds; nurses and administrators can take
a bed in or out of service.  Occupancy itself only changes through
admissions.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import BedStatus, Role
from ..permissions import IsNurseOrAdmin, method_roles
from ..serializers.wards import (
    AvailableBedsQuerySerializer,
    BedCreateSerializer,
    BedStatusSerializer,
    WardCreateSerializer,
    admission_data,
    available_ward_data,
    bed_data,
    ward_data,
)
from ..services import wards as ward_service
from .common import created, ok, validated

AdminCreates = method_roles(POST=(Role.ADMIN,))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminCreates])
def wards(request):
    if request.method == 'GET':
        ward_type = (request.query_params.get('wardType') or '').strip().upper() or None
        return ok('Wards fetched successfully', [ward_data(w) for w in ward_service.list_wards(ward_type=ward_type)])

    vd = validated(WardCreateSerializer, request.data).validated_data
    ward = ward_service.create_ward(
        request.user,
        name=vd['name'],
        ward_type=vd['wardType'],
        capacity=vd['capacity'],
        floor=vd.get('floor'),
        department_id=vd.get('departmentId'),
        request=request,
    )
    return created('Ward created successfully', ward_data(ward))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_beds(request):
    vd = validated(AvailableBedsQuerySerializer, request.query_params).validated_data
    items = ward_service.available_beds(vd.get('wardType'))
    return ok('Available beds fetched successfully', [available_ward_data(w) for w in items])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminCreates])
def ward_beds(request, ward_id: int):
    if request.method == 'GET':
        status = (request.query_params.get('status') or '').strip().upper() or None
        if status and status not in BedStatus.values:
            status = None
        beds = ward_service.ward_beds(ward_id, status=status)
        return ok('Beds fetched successfully', [bed_data(b) for b in beds])

    vd = validated(BedCreateSerializer, request.data).validated_data
    bed = ward_service.add_bed(
        request.user, ward_id, bed_number=vd['bedNumber'], features=vd['features'], request=request,
    )
    return created('Bed added successfully', bed_data(bed))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsNurseOrAdmin])
def bed_status(request, bed_id: int):
    vd = validated(BedStatusSerializer, request.data).validated_data
    bed = ward_service.set_bed_status(request.user, bed_id, vd['status'], request=request)
    return ok('Bed status updated successfully', bed_data(bed))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ward_admissions(request, ward_id: int):
    items = ward_service.ward_admissions(ward_id)
    return ok('Ward admissions fetched successfully', [admission_data(a) for a in items])
