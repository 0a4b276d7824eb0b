from rest_framework import permissions


class IsGroupAdmin(permissions.BasePermission):
    """
    Permission: User must have the admin role.

    There is a single friend group per deployment, so "admin" is a role on
    the profile rather than a per-group membership.
    """

    message = 'Apenas administradores podem realizar esta ação.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_group_admin)
