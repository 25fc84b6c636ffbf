from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """SUPER_ADMIN or ADMIN session"""
    message = 'Forbidden'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and user.is_active
            and getattr(user, 'is_admin_role', False)
        )


class IsSuperAdmin(BasePermission):
    message = 'Forbidden'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and user.is_active
            and getattr(user, 'is_super_admin', False)
        )


class IsSuperAdminOrReadOnly(BasePermission):
    """Admin roles may read, only SUPER_ADMIN may write"""
    message = 'Forbidden'

    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return IsAdminRole().has_permission(request, view)
        return IsSuperAdmin().has_permission(request, view)
