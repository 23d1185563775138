from rest_framework import permissions
from .models import User


def _has_role(request, *roles):
    user = request.user
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return _has_role(request, User.Role.ADMIN)


class IsAdminOrChef(permissions.BasePermission):
    def has_permission(self, request, view):
        return _has_role(request, User.Role.ADMIN, User.Role.CHEF)


class IsKitchenStaff(permissions.BasePermission):
    """Admins, chefs and kitchen staff."""

    def has_permission(self, request, view):
        return _has_role(request, User.Role.ADMIN, User.Role.CHEF, User.Role.KITCHEN)


class IsDispatchStaff(permissions.BasePermission):
    """Admins, chefs and delivery staff."""

    def has_permission(self, request, view):
        return _has_role(request, User.Role.ADMIN, User.Role.CHEF, User.Role.DELIVERY)


class IsDeliveryPerson(permissions.BasePermission):
    def has_permission(self, request, view):
        return _has_role(request, User.Role.DELIVERY)


class IsCustomer(permissions.BasePermission):
    def has_permission(self, request, view):
        return _has_role(request, User.Role.CUSTOMER)
