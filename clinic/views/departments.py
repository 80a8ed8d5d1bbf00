"""
Department endpoints.

Any staff member may browse departments; only an administrator may
create one.  The active listing is served from the cache.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Role
from ..permissions import method_roles
from ..serializers.auth import user_data
from ..serializers.departments import DepartmentCreateSerializer, department_data
from ..services import departments as department_service
from .common import created, ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, method_roles(POST=(Role.ADMIN,))])
def departments(request):
    if request.method == 'GET':
        return ok('Departments fetched successfully', department_service.list_departments())

    vd = validated(DepartmentCreateSerializer, request.data).validated_data
    department = department_service.create_department(
        request.user,
        name=vd.get('name', ''),
        description=vd.get('description', ''),
        code=vd.get('code', ''),
        request=request,
    )
    return created('Department created successfully', department_data(department))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def department_detail(request, department_id: int):
    department = department_service.get_department(department_id)
    return ok('Department fetched successfully', department_data(department))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def department_doctors(request, department_id: int):
    doctors = department_service.department_doctors(department_id)
    return ok('Doctors fetched successfully', [user_data(d) for d in doctors])
