"""
Role based access control.

The role is read from the verified token claim, so a request is judged
by the role it authenticated with.  ``roles(...)`` builds a permission
class for any combination of roles.
"""
from rest_framework.permissions import BasePermission

from .models import Role


def request_role(request):
    token = getattr(request, 'auth', None)
    if token is not None and hasattr(token, 'get'):
        role = token.get('role')
        if role:
            return role
    return getattr(getattr(request, 'user', None), 'role', None)


class HasRole(BasePermission):
    """Allow access only to the roles listed in ``allowed_roles``."""
    allowed_roles: frozenset = frozenset()
    message = 'You do not have permission to perform this action'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, 'user', None)
        return bool(user and user.is_authenticated and request_role(request) in self.allowed_roles)


def roles(*allowed: str) -> type[HasRole]:
    name = 'Only' + ''.join(r.title().replace('_', '') for r in allowed)
    return type(name, (HasRole,), {'allowed_roles': frozenset(allowed)})


IsAdminRole = roles(Role.ADMIN)
IsDoctor = roles(Role.DOCTOR)
IsPharmacy = roles(Role.PHARMACY)
IsBilling = roles(Role.BILLING)
IsClinician = roles(Role.DOCTOR, Role.NURSE)
IsPharmacyOrAdmin = roles(Role.PHARMACY, Role.ADMIN)
IsFrontDeskOrAdmin = roles(Role.FRONT_DESK, Role.ADMIN)
IsDoctorOrAdmin = roles(Role.DOCTOR, Role.ADMIN)
IsNurseOrAdmin = roles(Role.NURSE, Role.ADMIN)
IsBillingOrAdmin = roles(Role.BILLING, Role.ADMIN)
IsCareTeam = roles(Role.DOCTOR, Role.NURSE, Role.ADMIN)


def method_roles(**by_method: tuple) -> type[BasePermission]:
    """Per-method allow-lists, e.g. ``method_roles(POST=(Role.ADMIN,))``.

    Methods not listed are open to any authenticated staff member.
    """
    allowed = {method.upper(): frozenset(r) for method, r in by_method.items()}

    class MethodRoles(BasePermission):
        message = HasRole.message

        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            user = getattr(request, 'user', None)
            if not (user and user.is_authenticated):
                return False
            roles_for_method = allowed.get(request.method)
            return roles_for_method is None or request_role(request) in roles_for_method

    return MethodRoles
