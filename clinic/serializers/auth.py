from rest_framework import serializers

from .common import iso


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True, max_length=254)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)

    def validate_email(self, v):
        return (v or '').strip().lower()


def user_data(user):
    return {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'fullName': user.full_name,
        'email': user.email,
        'phone': user.phone,
        'role': user.role,
        'departmentId': user.department_id,
        'isActive': user.is_active,
        'lastLogin': iso(user.last_login),
        'createdAt': iso(user.date_joined),
    }
