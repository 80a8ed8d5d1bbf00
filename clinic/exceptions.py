"""
Error taxonomy and the unified API exception handler.

Services raise the typed errors below; ``api_exception_handler`` turns
them (and anything DRF or the ORM raises) into the ``{success, message}``
envelope every endpoint returns.
"""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, OperationalError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ServiceError(drf_exceptions.APIException):
    """Base class for errors raised deliberately by the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'

    def __init__(self, message: str | None = None):
        super().__init__(detail=message or self.default_detail)
        self.message = str(self.detail)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input'


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict with current state'


class InsufficientStock(ConflictError):
    default_detail = 'Insufficient stock'


class DependencyFailure(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'A required dependency is unavailable'


class AuthenticationError(drf_exceptions.AuthenticationFailed):
    default_detail = 'Invalid Credentials'


class AuthorizationError(drf_exceptions.PermissionDenied):
    default_detail = 'Access denied'


def _first_message(data) -> str:
    """Flatten DRF error payloads into one human readable line."""
    if isinstance(data, dict):
        if 'detail' in data:
            return _first_message(data['detail'])
        for field, value in data.items():
            msg = _first_message(value)
            if field == 'non_field_errors':
                return msg
            return f"{field}: {msg}"
        return 'Invalid input'
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else 'Invalid input'
    return str(data)


def _envelope(message: str, code: int, headers=None) -> Response:
    return Response({'success': False, 'message': message}, status=code, headers=headers)


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        messages = exc.message_dict if hasattr(exc, 'error_dict') else {'detail': exc.messages}
        return _envelope(_first_message(messages), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, IntegrityError):
        logger.warning('integrity error: %s', exc)
        return _envelope('Conflict with existing data', status.HTTP_409_CONFLICT)
    if isinstance(exc, OperationalError):
        logger.error('database unavailable: %s', exc)
        return _envelope('Database unavailable', status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(exc, Http404):
        return _envelope('Not found', status.HTTP_404_NOT_FOUND)

    # rest_framework.views loads the authentication classes on import
    from rest_framework.views import exception_handler as drf_exception_handler

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view') if context else None
        logger.exception('unhandled error in %s', getattr(view, '__name__', view), exc_info=exc)
        return _envelope('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)

    if resp.status_code >= 500:
        logger.error('%s: %s', type(exc).__name__, exc)
    headers = {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
    return _envelope(_first_message(resp.data), resp.status_code, headers=headers)
