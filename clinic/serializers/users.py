from rest_framework import serializers

from .common import CleanCharField


class UserCreateSerializer(serializers.Serializer):
    # Presence and role checks happen in the service so they share its messages.
    firstName = CleanCharField(max_length=50, required=False, allow_blank=True)
    lastName = CleanCharField(max_length=50, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)
    phone = serializers.RegexField(r'^[0-9]{10,15}$', required=False, allow_blank=True)
    role = serializers.CharField(required=False, allow_blank=True, max_length=20)
    departmentId = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class UserListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, default=10)
    role = serializers.CharField(required=False, max_length=20)
    departmentId = serializers.IntegerField(required=False, min_value=1)
