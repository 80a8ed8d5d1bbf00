"""
Departments.  The active listing is read on almost every screen, so its
serialised form is cached and dropped whenever a department is created.
"""
import logging

from django.conf import settings
from django.core.cache import cache

from .. import repositories
from ..exceptions import ConflictError, ValidationError
from ..models import AuditAction
from ..serializers.departments import department_data
from .audit import record_audit

logger = logging.getLogger(__name__)

DEPARTMENTS_CACHE_KEY = 'departments:active'


def list_departments() -> list[dict]:
    cached = cache.get(DEPARTMENTS_CACHE_KEY)
    if cached is not None:
        return cached
    payload = [department_data(d) for d in repositories.departments.with_staff_count()]
    cache.set(DEPARTMENTS_CACHE_KEY, payload, settings.DEPARTMENT_CACHE_SECONDS)
    return payload


def invalidate_department_cache() -> None:
    cache.delete(DEPARTMENTS_CACHE_KEY)


def create_department(actor, *, name, description, code='', request=None):
    name = (name or '').strip()
    if not name or not (description or '').strip():
        raise ValidationError('Name and Description of department is required')
    if repositories.departments.name_taken(name):
        raise ConflictError('Department name already exists')
    department = repositories.departments.create(
        name=name, description=description.strip(), code=(code or '').strip().upper(),
    )
    invalidate_department_cache()
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='Department', entity_id=department.pk,
        description=f'Created department {name}', new_value={'name': name, 'code': department.code},
        request=request,
    )
    logger.info('department created id=%s name=%s', department.pk, name)
    return department


def get_department(department_id):
    department = repositories.departments.get_or_404(department_id, include_inactive=False)
    department.staff_count = repositories.users.count(department=department)
    return department


def department_doctors(department_id):
    department = repositories.departments.get_or_404(department_id, include_inactive=False)
    return list(repositories.users.doctors_in(department))
