"""
Role-based permission classes.

Roles nest: superadmin > admin > officer. Tenant scoping (which homestays an
admin or officer may touch) is handled by `scope_homestays` in the homestays
app; these classes only gate by role. Officers additionally need the
`admin_dashboard_access` flag to reach any staff endpoint.
"""
from rest_framework.permissions import BasePermission

DASHBOARD_FLAG = 'admin_dashboard_access'


class IsSuperAdmin(BasePermission):
    message = 'Only superadmins can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_superadmin)


class IsAdminOrSuperAdmin(BasePermission):
    message = 'Only admins can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_superadmin or user.is_tenant_admin))


class IsTenantAdmin(BasePermission):
    message = 'Only admins can manage officers.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_tenant_admin)


class IsOfficer(BasePermission):
    message = 'Only officers can access this resource.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_officer and user.parent_admin_id
                    and user.has_flag(DASHBOARD_FLAG))


class IsRegistryStaff(BasePermission):
    """Any authenticated superadmin, admin or officer"""

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated and user.role in ('superadmin', 'admin', 'officer')):
            return False
        return not user.is_officer or user.has_flag(DASHBOARD_FLAG)
