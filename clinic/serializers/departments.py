from rest_framework import serializers

from .common import CleanCharField, iso


class DepartmentCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=100, required=False, allow_blank=True)
    description = CleanCharField(max_length=500, required=False, allow_blank=True)
    code = CleanCharField(max_length=10, required=False, allow_blank=True)


def department_data(department):
    data = {
        'id': department.id,
        'name': department.name,
        'description': department.description,
        'code': department.code,
        'isActive': department.is_active,
        'createdAt': iso(department.created_at),
    }
    staff_count = getattr(department, 'staff_count', None)
    if staff_count is not None:
        data['staffCount'] = staff_count
    return data
