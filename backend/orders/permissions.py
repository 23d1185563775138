from rest_framework import permissions

from users.models import User

STAFF_ROLES = (User.Role.ADMIN, User.Role.CHEF, User.Role.KITCHEN, User.Role.DELIVERY)


class IsOrderOwnerOrStaff(permissions.BasePermission):
    """
    Object-level access to an order:
    - Restaurant staff can access any order
    - Customers can access only their own orders
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if getattr(user, "role", None) in STAFF_ROLES:
            return True

        # Get the order object (handle both Order and OrderItem)
        order = getattr(obj, "order", obj)
        return order.customer_id == user.pk


class IsOrderOwnerOrAdminOrChef(permissions.BasePermission):
    """Order owner, or an admin / chef acting on the customer's behalf."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role in (User.Role.ADMIN, User.Role.CHEF):
            return True
        return obj.customer_id == user.pk


class IsOrderOwnerOrAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role == User.Role.ADMIN:
            return True
        return obj.customer_id == user.pk
