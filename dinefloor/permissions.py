from rest_framework.permissions import BasePermission

ADMIN = 'ADMIN'
WAITER = 'WAITER'
KITCHEN = 'KITCHEN'
STANDARD = 'STANDARD'

ROLES = (ADMIN, WAITER, KITCHEN, STANDARD)


def staff_role(user):
    """Role of a staff user: superusers are ADMIN, otherwise the first role group they belong to."""
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return ADMIN
    names = set(user.groups.values_list('name', flat=True))
    for role in ROLES:
        if role in names:
            return role
    return STANDARD


class APIKeyPermission(BasePermission):
    """
    Custom permission class for API key authentication
    """

    def has_permission(self, request, view):
        # APIKeyAuthentication sets request.auth to the key on success
        return hasattr(request, 'auth') and request.auth is not None


class StaffRolePermission(APIKeyPermission):
    """
    Requires an identified staff member whose role is listed in the view's
    ``allowed_roles``. When ``allowed_roles`` is a dict it is keyed by HTTP
    method, and methods it does not list only need the API key.
    """

    message = 'This action is not allowed for your role'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        allowed = getattr(view, 'allowed_roles', ROLES)
        if isinstance(allowed, dict):
            if request.method not in allowed:
                return True
            allowed = allowed[request.method]

        return staff_role(request.user) in allowed
