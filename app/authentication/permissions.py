"""
Role-based permission classes for the marketplace API.

This module provides DRF permission classes keyed on User.role:
- IsPatient: Authenticated patient
- IsPractitioner: Authenticated practitioner
- IsPlatformAdmin: Admin role or Django superuser

Permission classes only gate by global role. Whether the principal takes
part in a specific appointment is checked by appointments.permissions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsPatient(permissions.BasePermission):
    message = "Only patients can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_patient)


class IsPractitioner(permissions.BasePermission):
    message = "Only practitioners can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_practitioner)


class IsPlatformAdmin(permissions.BasePermission):
    message = "Only platform admins can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_platform_admin)
