from rest_framework.permissions import BasePermission


ADMIN_ROLE = 'ADMIN'


def is_admin(user) -> bool:
    """True for superusers and holders of the active ADMIN role."""
    return bool(user and user.is_authenticated and user.has_role(ADMIN_ROLE))


class IsAdminRole(BasePermission):
    """Back-office only."""

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsOwnerOrAdmin(BasePermission):
    """
    Object-level check for resources owned through an order.

    The view's ``get_owner_id(obj)`` returns the owning user id; admins pass
    regardless. Guest orders (no owner) are visible to admins only.
    """

    message = 'You can only access your own orders.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if is_admin(request.user):
            return True
        owner_id = view.get_owner_id(obj)
        return owner_id is not None and owner_id == request.user.pk
