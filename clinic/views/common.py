"""
Helpers shared by the API views.

Every endpoint answers with the same envelope::

    {"success": true, "message": "...", "data": ...}

Errors take the same shape through :func:`clinic.exceptions.api_exception_handler`.
"""
from __future__ import annotations

from rest_framework import status as http
from rest_framework.response import Response


def ok(message: str, data=None, code: int = http.HTTP_200_OK) -> Response:
    body = {'success': True, 'message': message}
    if data is not None:
        body['data'] = data
    return Response(body, status=code)


def created(message: str, data=None) -> Response:
    return ok(message, data, http.HTTP_201_CREATED)


def validated(serializer_class, data):
    """Run ``serializer_class`` over ``data`` and return the bound serializer."""
    s = serializer_class(data=data)
    s.is_valid(raise_exception=True)
    return s
