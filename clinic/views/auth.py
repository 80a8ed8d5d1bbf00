"""
Staff login.

``POST /<actor>/login`` where ``actor`` is the role the caller claims
(``admin``, ``doctor``, ``front-desk`` ...).  The claimed role must match
the account, so a pharmacist cannot sign in through the doctor screen.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle

from ..serializers.auth import LoginSerializer, user_data
from ..services import auth as auth_service
from .common import ok, validated


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login(request, actor):
    vd = validated(LoginSerializer, request.data).validated_data
    result = auth_service.login(
        actor=actor, email=vd.get('email', ''), password=vd.get('password', ''), request=request,
    )
    return ok('Login Successful', {
        'accessToken': result['accessToken'],
        'role': result['role'],
        'user': user_data(result['user']),
    })
