"""
Drug catalogue and restock request endpoints.

Pharmacy maintains stock and raises restock requests; an administrator
approves or rejects them before pharmacy books the delivery in.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import IsAdminRole, IsPharmacyOrAdmin, method_roles
from ..serializers.common import paginated
from ..serializers.pharmacy import (
    DrugCreateSerializer,
    DrugListQuerySerializer,
    RestockCreateSerializer,
    RestockFulfillSerializer,
    RestockListQuerySerializer,
    RestockRejectSerializer,
    StockSerializer,
    drug_data,
    restock_data,
)
from ..services import pharmacy as pharmacy_service
from .common import created, ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, method_roles(POST=(Role.PHARMACY, Role.ADMIN))])
def drugs(request):
    if request.method == 'GET':
        vd = validated(DrugListQuerySerializer, request.query_params).validated_data
        items, total = pharmacy_service.list_drugs(
            q=vd.get('q'), category=vd.get('category'), page=vd['page'], limit=vd.get('limit'),
        )
        return ok('Drugs fetched successfully', paginated(items, total, vd['page'], vd.get('limit'), drug_data))

    s = validated(DrugCreateSerializer, request.data)
    drug = pharmacy_service.create_drug(request.user, request=request, **s.to_service_kwargs())
    return created('Drug created successfully', drug_data(drug))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def drug_detail(request, drug_id: int):
    return ok('Drug fetched successfully', drug_data(pharmacy_service.get_drug(drug_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyOrAdmin])
def low_stock(request):
    return ok('Low stock drugs fetched successfully', [drug_data(d) for d in pharmacy_service.low_stock_drugs()])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyOrAdmin])
def expired(request):
    return ok('Expired drugs fetched successfully', [drug_data(d) for d in pharmacy_service.expired_drugs()])


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPharmacyOrAdmin])
def add_stock(request, drug_id: int):
    vd = validated(StockSerializer, request.data).validated_data
    drug = pharmacy_service.add_stock(request.user, drug_id, vd['quantity'], request=request)
    return ok('Stock updated successfully', drug_data(drug))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, method_roles(GET=(Role.PHARMACY, Role.ADMIN), POST=(Role.PHARMACY,))])
def restock_requests(request):
    if request.method == 'GET':
        vd = validated(RestockListQuerySerializer, request.query_params).validated_data
        items, total = pharmacy_service.list_restock_requests(
            status=vd.get('status'), drug_id=vd.get('drugId'), page=vd['page'], limit=vd.get('limit'),
        )
        return ok('Restock requests fetched successfully',
                  paginated(items, total, vd['page'], vd.get('limit'), restock_data))

    vd = validated(RestockCreateSerializer, request.data).validated_data
    restock = pharmacy_service.create_restock_request(
        request.user, drug_id=vd['drugId'], requested_quantity=vd['requestedQuantity'],
        reason=vd['reason'], notes=vd['notes'], request=request,
    )
    return created('Restock request created successfully', restock_data(restock))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyOrAdmin])
def pending_restock_requests(request):
    items = pharmacy_service.pending_restock_requests()
    return ok('Pending restock requests fetched successfully', [restock_data(r) for r in items])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyOrAdmin])
def restock_detail(request, restock_id: int):
    return ok('Restock request fetched successfully', restock_data(pharmacy_service.get_restock_request(restock_id)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def approve_restock(request, restock_id: int):
    restock = pharmacy_service.approve_restock(request.user, restock_id, request=request)
    return ok('Restock request approved', restock_data(restock))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def reject_restock(request, restock_id: int):
    vd = validated(RestockRejectSerializer, request.data).validated_data
    restock = pharmacy_service.reject_restock(request.user, restock_id, reason=vd['reason'], request=request)
    return ok('Restock request rejected', restock_data(restock))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPharmacyOrAdmin])
def fulfill_restock(request, restock_id: int):
    vd = validated(RestockFulfillSerializer, request.data).validated_data
    restock = pharmacy_service.fulfill_restock(request.user, restock_id, quantity=vd.get('quantity'), request=request)
    return ok('Restock request fulfilled', restock_data(restock))
