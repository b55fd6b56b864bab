from __future__ import annotations

import logging
from typing import Dict

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import EmailMessage

from .models import EventLog
from .adapters.mail.client import get_mail_connection
from .adapters.mail.templates import annotate_url, invitation_html, task_assigned_html

logger = logging.getLogger(__name__)


def _log_event(event_type: str, payload: Dict) -> None:
    EventLog.objects.create(event_type=event_type, payload=payload)


def _send_html(to: str, subject: str, body: str) -> None:
    message = EmailMessage(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
        connection=get_mail_connection(),
    )
    message.content_subtype = "html"
    message.send()


@shared_task(
    bind=True,
    name="core.notifications.send_task_assigned_email",
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_jitter=True,
    retry_kwargs={"max_retries": 5},
)
def send_task_assigned_email(self, user_id: int, task_id: int):
    user = get_user_model().objects.get(pk=user_id)
    url = annotate_url(settings.PUBLIC_BASE_URL, task_id)
    _send_html(user.email, "Assigned to new task", task_assigned_html(user.email, url))
    _log_event("TASK_ASSIGNED_EMAIL_SENT", {"user_id": user_id, "task_id": task_id})
    logger.info("Task %s assignment mail sent to user %s", task_id, user_id)
    return {"user_id": user_id, "task_id": task_id}


@shared_task(
    bind=True,
    name="core.notifications.send_invitation_email",
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_jitter=True,
    retry_kwargs={"max_retries": 5},
)
def send_invitation_email(self, user_id: int, task_id: int):
    user = get_user_model().objects.get(pk=user_id)
    url = annotate_url(settings.PUBLIC_BASE_URL, task_id)
    _send_html(user.email, "Invitation to Lawnotation", invitation_html(user.email, url))
    _log_event("INVITATION_EMAIL_SENT", {"user_id": user_id, "task_id": task_id})
    logger.info("Invitation for task %s mailed to user %s", task_id, user_id)
    return {"user_id": user_id, "task_id": task_id}
