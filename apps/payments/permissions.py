from rest_framework.permissions import BasePermission


class IsPaymentOwnerOrAdmin(BasePermission):
    """
    Permission to view a payment.

    Allows if the user made the payment or is an admin.
    """

    message = 'Você não tem permissão para ver este pagamento.'

    def has_object_permission(self, request, view, obj):
        return obj.user_id == request.user.id or request.user.is_group_admin
