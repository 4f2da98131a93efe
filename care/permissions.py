"""
Role and tenant based access control.

DRF permission classes guard the HTTP views; :func:`check_capability`
is the single check every real-time intent handler runs before it
touches the database.
"""
from __future__ import annotations

from rest_framework.permissions import BasePermission

from .exceptions import AuthorizationError

STAFF_ROLES = {"admin", "doctor", "reception", "pharmacy", "lab"}


def _hospital_user(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    if not getattr(user, "hospital_id", None):
        return None
    return user


class IsHospitalStaff(BasePermission):
    """Authenticated staff bound to a hospital."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _hospital_user(request)
        return bool(user and getattr(user, "role", None) in STAFF_ROLES)


class IsLabRole(BasePermission):
    """Lab technicians and hospital admins."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _hospital_user(request)
        return bool(user and getattr(user, "role", None) in {"lab", "admin"})


class IsPharmacyRole(BasePermission):
    """Pharmacy staff and hospital admins."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _hospital_user(request)
        return bool(user and getattr(user, "role", None) in {"pharmacy", "admin"})


class IsWardStaff(BasePermission):
    """Doctors, reception and hospital admins move patients in and out of beds."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _hospital_user(request)
        return bool(user and getattr(user, "role", None) in {"doctor", "reception", "admin"})


class IsHospitalAdmin(BasePermission):
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _hospital_user(request)
        return bool(user and getattr(user, "role", None) == "admin")


def check_capability(session, *, roles=None, hospital_id=None, require_hospital=True):
    """Raise :class:`AuthorizationError` unless ``session`` may act.

    ``session`` is a :class:`care.realtime.session.SessionInfo` (or None
    for anonymous connections).  ``roles`` restricts the acting role;
    ``hospital_id`` requires the target record to belong to the session's
    hospital.  Returns the session so callers can chain on it.
    """
    if session is None:
        raise AuthorizationError('Unauthorized')
    if require_hospital and not session.hospital_id:
        raise AuthorizationError('Unauthorized')
    if roles is not None and session.role not in roles:
        raise AuthorizationError('Role not permitted', code='forbidden')
    if hospital_id is not None and str(hospital_id) != str(session.hospital_id):
        raise AuthorizationError('Unauthorized')
    return session
