"""Permission classes shared by the booking API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_ground_staff(user) -> bool:  # type: ignore
    """Staff accounts manage bookings, payments and rate settings."""
    if not user or not user.is_authenticated:
        return False
    return bool(getattr(user, "is_staff", False) or getattr(user, "is_superuser", False))


class IsGroundStaff(permissions.BasePermission):
    """Only staff accounts may access."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_ground_staff(request.user)


class IsGroundStaffOrReadOnly(permissions.BasePermission):
    """
    Anyone may read; writes require a staff account.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_ground_staff(request.user)
