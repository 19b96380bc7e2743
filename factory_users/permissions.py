from rest_framework.permissions import SAFE_METHODS, BasePermission
from factory_users.models import FactoryUser

class IsFactoryAuthenticated(BasePermission):
    """
    Allows access only to authenticated FactoryUsers.
    """
    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and isinstance(request.user, FactoryUser)
        )


class HasFactoryRole(BasePermission):
    """
    Restricts a view to the roles on its `allowed_roles` attribute.
    Unsafe methods use `write_roles` instead when the view sets it.
    """
    def has_permission(self, request, view):
        allowed_roles = getattr(view, "allowed_roles", ["*"])
        if request.method not in SAFE_METHODS:
            allowed_roles = getattr(view, "write_roles", None) or allowed_roles
        if "*" in allowed_roles:
            return True
        return getattr(request.user, "role", None) in allowed_roles
