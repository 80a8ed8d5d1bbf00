"""
Administrative endpoints: staff accounts and the audit trail.

All of them require the ADMIN role.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsAdminRole
from ..serializers.audit import AuditLogQuerySerializer, audit_data
from ..serializers.auth import user_data
from ..serializers.common import paginated
from ..serializers.users import UserCreateSerializer, UserListQuerySerializer
from ..services import audit as audit_service
from ..services import users as user_service
from .common import created, ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def users(request):
    if request.method == 'GET':
        vd = validated(UserListQuerySerializer, request.query_params).validated_data
        result = user_service.list_users(
            page=vd['page'], limit=vd['limit'], role=vd.get('role'), department_id=vd.get('departmentId'),
        )
        result['users'] = [user_data(u) for u in result['users']]
        return ok('Users fetched successfully', result)

    vd = validated(UserCreateSerializer, request.data).validated_data
    user = user_service.create_user(
        request.user,
        first_name=vd.get('firstName', ''),
        last_name=vd.get('lastName', ''),
        email=vd.get('email', ''),
        password=vd.get('password', ''),
        role=vd.get('role', ''),
        phone=vd.get('phone', ''),
        department_id=vd.get('departmentId'),
        request=request,
    )
    return created('User created successfully', user_data(user))


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def deactivate_user(request, user_id: int):
    user_service.deactivate_user(request.user, user_id, request=request)
    return ok('User deactivated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_logs(request):
    vd = validated(AuditLogQuerySerializer, request.query_params).validated_data
    items, total = audit_service.list_audit_logs(
        user_id=vd.get('userId'),
        entity_type=vd.get('entityType'),
        entity_id=vd.get('entityId'),
        action=vd.get('action'),
        status=vd.get('status'),
        page=vd['page'],
        limit=vd['limit'],
    )
    return ok('Audit logs fetched successfully', paginated(items, total, vd['page'], vd['limit'], audit_data))
