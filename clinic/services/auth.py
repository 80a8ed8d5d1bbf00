"""
Credential checks and token issuance for ``POST /<actor>/login``.

The actor in the URL must name a role; the account behind the email must
exist, be active, match the password and hold that role.  Every attempt
leaves a LOGIN row in the audit log.
"""
from __future__ import annotations

import logging

from django.utils import timezone

from .. import repositories
from ..authentication import issue_access_token
from ..exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..models import AuditAction, AuditStatus, Role
from .audit import record_audit

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid Credentials'


def normalize_actor(actor: str) -> str:
    value = (actor or '').strip().upper().replace('-', '_')
    if value not in Role.values:
        raise ValidationError('Invalid Actor')
    return value


def _fail(*, user, email, reason, request):
    record_audit(
        user=user, action=AuditAction.LOGIN, entity_type='User',
        entity_id=getattr(user, 'pk', None), description=f'Login failed for {email}'[:500],
        status=AuditStatus.FAILURE, error_message=reason, request=request,
    )
    logger.warning('login failed email=%s reason=%s', email, reason)


def login(*, actor: str, email: str, password: str, request=None) -> dict:
    role = normalize_actor(actor)
    email = (email or '').strip().lower()
    if not email or not password:
        raise AuthenticationError(INVALID_CREDENTIALS)

    user = repositories.users.by_email(email)
    if user is None:
        # hash anyway so an unknown email costs as much as a wrong password
        repositories.users.model().set_password(password)
    if user is None or not user.check_password(password):
        _fail(user=user, email=email, reason=INVALID_CREDENTIALS, request=request)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.is_active:
        _fail(user=user, email=email, reason='Inactive user', request=request)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if user.role != role:
        _fail(user=user, email=email, reason='Role mismatch', request=request)
        raise AuthorizationError('Role mismatch')

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    token = issue_access_token(user)
    record_audit(
        user=user, action=AuditAction.LOGIN, entity_type='User', entity_id=user.pk,
        description=f'{user.role} login', request=request,
    )
    logger.info('login ok user=%s role=%s', user.pk, user.role)
    return {'accessToken': str(token), 'role': user.role, 'user': user}
