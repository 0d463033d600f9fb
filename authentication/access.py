"""
Admin access gate.

An identity is an admin when its email is on the configured allowlist, or
else when its profile in the data backend has ``is_admin`` set.
"""
import logging

from django.conf import settings
from rest_framework.permissions import BasePermission

from reports.backends import get_data_backend
from reports.exceptions import BackendError, NotAuthorized
from .session import identity_from_request

logger = logging.getLogger(__name__)


class AccessGate:
    def __init__(self, backend, admin_emails=()):
        self.backend = backend
        self.admin_emails = {email.strip().lower() for email in admin_emails if email.strip()}

    def check(self, identity):
        """
        Return True or False for a signed-in identity, and None when there
        is no identity to judge.
        """
        if identity is None:
            return None
        if identity.email and identity.email.lower() in self.admin_emails:
            return True
        try:
            profile = self.backend.get_profile(identity.user_id)
        except BackendError as exc:
            logger.error("Failed to fetch profile for %s: %s", identity.email, exc.cause or exc)
            return False
        return bool(profile and profile.get('is_admin'))


def get_access_gate():
    return AccessGate(get_data_backend(), settings.CHECKLIST.get('ADMIN_EMAILS', ()))


class IsChecklistAdmin(BasePermission):
    """Allows access only to identities the access gate accepts."""
    message = NotAuthorized().args[0]

    def has_permission(self, request, view):
        identity = identity_from_request(request)
        allowed = get_access_gate().check(identity)
        if allowed is False:
            logger.warning("Admin access denied for %s", identity.email)
        return bool(allowed)
