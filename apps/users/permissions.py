"""Permission classes shared by the marketplace apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin(user) -> bool:  # type: ignore
    if not getattr(user, "is_authenticated", False):
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin_user") and user.is_admin_user()


def is_host(user) -> bool:  # type: ignore
    return bool(getattr(user, "is_authenticated", False) and hasattr(user, "is_host") and user.is_host())


class IsAdminRole(permissions.BasePermission):
    """Only platform admins (role, staff or superuser)."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """Anyone may read, only admins may write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)


class IsHostOrAdmin(permissions.BasePermission):
    """Hosts manage their own listings, admins manage everything."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user) or is_host(request.user)

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        if is_admin(request.user):
            return True
        owner_id = getattr(obj, "host_id", None)
        if owner_id is None and hasattr(obj, "property"):
            owner_id = obj.property.host_id
        return owner_id == request.user.id
