"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission


class IsDoctorRole(BasePermission):
    """Allow access only to users with the doctor role."""
    message = 'Only doctors can perform this action.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == "doctor")


class IsPatientRole(BasePermission):
    """Allow access only to users with the patient role."""
    message = 'Only patients can perform this action.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == "patient")
