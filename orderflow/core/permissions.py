from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Only ADMIN / SUPERADMIN users reach mutation entry points"""
    message = 'Admin role required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role)


class IsDealer(BasePermission):
    message = 'Dealer account required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.dealer_id)
