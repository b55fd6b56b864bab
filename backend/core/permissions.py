from django.conf import settings
from rest_framework.permissions import BasePermission, SAFE_METHODS


class HasWriteToken(BasePermission):
    """Header-based write protection in front of the editor endpoints.

    Read-only requests pass without a token. Writes (including replicate,
    merge and reassignment) need:
      X-Lawnotation-Write-Token: <token>

    Disabled while WRITE_TOKEN is empty.
    """

    message = "Missing or invalid write token."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True

        token = (getattr(settings, "WRITE_TOKEN", "") or "").strip()
        if not token:
            return True

        provided = (request.headers.get("X-Lawnotation-Write-Token", "") or "").strip()
        return provided == token
