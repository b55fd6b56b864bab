"""User identity provider: lookup by e-mail, invitation and profile metadata.

Invited users get an account without a usable password and a profile whose
metadata names the task they were invited for, so the frontend can route them
to it on first login. Mails go out through Celery once the surrounding
transaction commits.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from kombu.exceptions import OperationalError

from .exceptions import IdentityProviderError
from .models import EventLog, UserProfile
from .notifications import send_invitation_email, send_task_assigned_email

logger = logging.getLogger(__name__)


def _queue_mail(job, user_id: int, task_id: int) -> None:
    """Queue a mail job once the current transaction commits.

    An unreachable broker only loses the mail; the user is already resolved.
    """

    def enqueue():
        try:
            job.delay(user_id, task_id)
        except OperationalError as exc:
            logger.warning(
                "Could not queue %s for user %s (task %s): %s",
                getattr(job, "name", job),
                user_id,
                task_id,
                exc,
            )

    transaction.on_commit(enqueue)


def find_user_by_email(email: str):
    User = get_user_model()
    try:
        return User.objects.filter(email__iexact=email).order_by("id").first()
    except DatabaseError as exc:
        raise IdentityProviderError(f"Error looking up {email}: {exc}") from exc


def update_user_metadata(user, **metadata) -> UserProfile:
    try:
        with transaction.atomic():
            profile, _ = UserProfile.objects.select_for_update().get_or_create(user=user)
            profile.metadata = {**(profile.metadata or {}), **metadata}
            profile.save(update_fields=["metadata"])
    except DatabaseError as exc:
        raise IdentityProviderError(
            f"Error updating metadata of user {user.pk}: {exc}"
        ) from exc
    return profile


def invite_user_by_email(email: str, task_id: int):
    User = get_user_model()
    try:
        with transaction.atomic():
            user = User(username=email, email=email)
            user.set_unusable_password()
            user.save()
            UserProfile.objects.create(
                user=user, role="annotator", metadata={"invited_task_id": task_id}
            )
            EventLog.objects.create(
                event_type="USER_INVITED",
                payload={"user_id": user.pk, "task_id": task_id},
            )
    except DatabaseError as exc:
        raise IdentityProviderError(f"Error inviting {email}: {exc}") from exc

    user_id = user.pk
    _queue_mail(send_invitation_email, user_id, task_id)
    logger.info("Invited %s (user %s) to task %s", email, user_id, task_id)
    return user


def assign_user_to_task(email: str, task_id: int):
    """Return the user for ``email``, provisioning one if needed.

    Existing users get ``assigned_task_id`` in their metadata and a mail
    pointing at the task; unknown addresses are invited. Either way the result
    is a saved user, or IdentityProviderError is raised.
    """
    user = find_user_by_email(email)
    if user is None:
        return invite_user_by_email(email, task_id)

    update_user_metadata(user, assigned_task_id=task_id)
    user_id = user.pk
    _queue_mail(send_task_assigned_email, user_id, task_id)
    return user
