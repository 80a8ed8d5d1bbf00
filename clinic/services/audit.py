import json
from typing import Any, Optional

from django.core.serializers.json import DjangoJSONEncoder

from ..models import AuditAction, AuditLog, AuditStatus, User
from .. import repositories


def _client_ip(request) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None


def _jsonable(value: Any) -> Any:
    # Decimals and dates arrive from model snapshots.
    if value is None:
        return None
    return json.loads(json.dumps(value, cls=DjangoJSONEncoder))


def record_audit(
    *,
    user: Optional[User],
    action: str,
    entity_type: str,
    entity_id: Any = None,
    description: str = '',
    old_value: Any = None,
    new_value: Any = None,
    request=None,
    status: str = AuditStatus.SUCCESS,
    error_message: str = '',
) -> AuditLog:
    return repositories.audit_logs.create(
        user=user if isinstance(user, User) and user.pk else None,
        action=action,
        entity_type=entity_type,
        entity_id='' if entity_id is None else str(entity_id),
        description=description[:500],
        old_value=_jsonable(old_value),
        new_value=_jsonable(new_value),
        ip_address=_client_ip(request),
        user_agent=(request.META.get('HTTP_USER_AGENT', '') if request is not None else '')[:255],
        status=status,
        error_message=error_message,
    )


def list_audit_logs(*, user_id=None, entity_type=None, entity_id=None, action=None, status=None, page=1, limit=50):
    filters = {
        'user_id': user_id,
        'entity_type': entity_type,
        'entity_id': None if entity_id is None else str(entity_id),
        'action': action,
        'status': status,
    }
    return repositories.audit_logs.list(filters=filters, page=page, limit=limit)


__all__ = ['record_audit', 'list_audit_logs', 'AuditAction', 'AuditStatus']
