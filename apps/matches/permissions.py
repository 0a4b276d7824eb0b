from rest_framework.permissions import BasePermission


class CanManageMatch(BasePermission):
    """
    Permission to edit a match or change someone else's participation.

    Allows if the user created the match or is an admin.
    """

    message = 'Apenas o organizador ou um administrador pode gerenciar esta partida.'

    def has_object_permission(self, request, view, obj):
        return obj.can_manage(request.user)
