"""
Bearer token authentication.

Tokens are simplejwt access tokens carrying ``sub`` (user id), ``role``
and, for department staff, ``departmentId``.  On top of signature and
expiry checks the account must still exist, be active and hold the role
the token was issued for.  Kept apart from the views so DRF can import
it during settings initialisation without circular imports.
"""
from __future__ import annotations

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken


def issue_access_token(user) -> AccessToken:
    """Signed access token for ``user`` with the role claims the API relies on."""
    token = AccessToken()
    token[api_settings.USER_ID_CLAIM] = str(user.pk)
    token['role'] = user.role
    if user.department_id:
        token['departmentId'] = user.department_id
    return token


class BearerTokenAuthentication(JWTAuthentication):
    """``Authorization: Bearer <token>``; rejects stale role claims."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if validated_token.get('role') != user.role:
            raise AuthenticationFailed('Token role no longer matches the account')
        return user
