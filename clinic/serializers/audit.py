from rest_framework import serializers

from ..models import AuditAction, AuditStatus
from .common import iso


class AuditLogQuerySerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1, required=False)
    entityType = serializers.CharField(max_length=64, required=False)
    entityId = serializers.CharField(max_length=64, required=False)
    action = serializers.ChoiceField(choices=AuditAction.choices, required=False)
    status = serializers.ChoiceField(choices=AuditStatus.choices, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=50)


def audit_data(entry):
    return {
        'id': entry.id,
        'userId': entry.user_id,
        'action': entry.action,
        'entityType': entry.entity_type,
        'entityId': entry.entity_id or None,
        'description': entry.description,
        'oldValue': entry.old_value,
        'newValue': entry.new_value,
        'ipAddress': entry.ip_address,
        'userAgent': entry.user_agent,
        'status': entry.status,
        'errorMessage': entry.error_message or None,
        'timestamp': iso(entry.timestamp),
    }
