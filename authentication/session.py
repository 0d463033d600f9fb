"""
Session provider: who is making the request, and notifications when a
session starts or ends.

Components that need an identity take it as an argument instead of reading
``request.user`` themselves, so they can be driven from tests without a
request at all.
"""
import logging
from dataclasses import dataclass

from django.dispatch import Signal

logger = logging.getLogger(__name__)

# Sent with ``identity`` (an Identity or None) and ``event`` ('login' or 'logout').
session_changed = Signal()


@dataclass(frozen=True)
class Identity:
    user_id: object
    email: str


def identity_from_request(request):
    """Return the signed-in Identity for ``request``, or None."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return Identity(user_id=user.pk, email=user.email)


def identity_from_user(user):
    return Identity(user_id=user.pk, email=user.email)


def on_session_change(listener):
    """
    Subscribe ``listener(identity, event)`` to session changes.

    Returns a callable that unsubscribes it again.
    """
    def receiver(sender, identity=None, event=None, **kwargs):
        listener(identity, event)

    session_changed.connect(receiver, weak=False)

    def unsubscribe():
        session_changed.disconnect(receiver)

    return unsubscribe


def notify_session_change(identity, event):
    logger.info("Session %s for %s", event, identity.email if identity else 'anonymous')
    session_changed.send(sender=Identity, identity=identity, event=event)
