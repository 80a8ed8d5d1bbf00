import logging
import math

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from .. import repositories
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import AuditAction, Role
from .audit import record_audit
from .departments import invalidate_department_cache

logger = logging.getLogger(__name__)

DEPARTMENT_ROLES = {Role.DOCTOR, Role.NURSE}


def create_user(actor, *, first_name, last_name, email, password, role, phone='', department_id=None, request=None):
    if not all([first_name, last_name, email, password, role]):
        raise ValidationError('Required fields missing')
    role = str(role).strip().upper()
    if role not in Role.values:
        raise ValidationError('Invalid role')
    if len(password) < 8:
        raise ValidationError('Password must be at least 8 characters')
    try:
        validate_password(password)
    except DjangoValidationError as e:
        raise ValidationError(' '.join(e.messages))

    email = email.strip().lower()
    if repositories.users.by_email(email) is not None:
        raise ConflictError('User with this email already exists')

    department = None
    if department_id:
        department = repositories.departments.get(department_id, include_inactive=False)
        if department is None:
            raise ValidationError('Department not found')
    if role in DEPARTMENT_ROLES and department is None:
        raise ValidationError(f'Department is required for role {role}')

    with transaction.atomic():
        user = repositories.users.model.objects.create_user(
            email=email, password=password, first_name=first_name.strip(), last_name=last_name.strip(),
            phone=phone or '', role=role, department=department,
        )
        record_audit(
            user=actor, action=AuditAction.CREATE, entity_type='User', entity_id=user.pk,
            description=f'Created {role} account {email}', new_value={'email': email, 'role': role},
            request=request,
        )
    invalidate_department_cache()
    logger.info('user created id=%s role=%s by=%s', user.pk, role, getattr(actor, 'pk', None))
    return user


def list_users(*, page=1, limit=10, role=None, department_id=None) -> dict:
    page = max(1, int(page or 1))
    limit = max(1, min(int(limit or 10), repositories.MAX_PAGE_SIZE))
    filters = {
        'role': role.strip().upper() if role else None,
        'department_id': department_id,
    }
    items, total = repositories.users.list(filters=filters, page=page, limit=limit)
    return {
        'currentPage': page,
        'totalPages': math.ceil(total / limit) if total else 0,
        'totalUsers': total,
        'users': items,
    }


def deactivate_user(actor, user_id, *, request=None):
    user = repositories.users.get(user_id, lock=False, include_inactive=False)
    if user is None:
        raise NotFoundError('User not found or already deactivated')
    user.is_active = False
    user.save(update_fields=['is_active'])
    record_audit(
        user=actor, action=AuditAction.DELETE, entity_type='User', entity_id=user.pk,
        description=f'Deactivated {user.email}', old_value={'isActive': True},
        new_value={'isActive': False}, request=request,
    )
    invalidate_department_cache()
    logger.info('user deactivated id=%s by=%s', user.pk, getattr(actor, 'pk', None))
    return user
