"""Tests for the identity provider, mail templates and mail jobs."""
import os
from unittest import mock

from django.core import mail
from django.db import DatabaseError
from django.test import TestCase, override_settings

from core.adapters.mail.client import get_mail_connection
from core.adapters.mail.templates import annotate_url, invitation_html, task_assigned_html
from core.exceptions import IdentityProviderError
from core.identity import (
    assign_user_to_task,
    find_user_by_email,
    invite_user_by_email,
    update_user_metadata,
)
from core.models import EventLog, UserProfile
from core.notifications import send_invitation_email, send_task_assigned_email
from .helpers import make_project, make_task, make_user


class MailTemplatesTestCase(TestCase):
    """Mail bodies are HTML; user-controlled values must be escaped."""

    def test_annotate_url(self):
        self.assertEqual(
            annotate_url("https://lawnotation.test/", 7),
            "https://lawnotation.test/annotate/7?seq=1",
        )
        self.assertEqual(
            annotate_url("https://lawnotation.test", 7, seq=4),
            "https://lawnotation.test/annotate/7?seq=4",
        )

    def test_task_assigned_body(self):
        body = task_assigned_html("anna@example.org", "https://lawnotation.test/annotate/7?seq=1")

        self.assertTrue(body.startswith("Hello anna@example.org,<br />"))
        self.assertIn("You have been assigned to a new task.", body)
        self.assertIn('<a href="https://lawnotation.test/annotate/7?seq=1">Click here</a>', body)

    def test_values_are_escaped(self):
        body = invitation_html('<b>"x"</b>@example.org', "https://x.test/?a=1&b=2")

        self.assertNotIn("<b>", body)
        self.assertIn("&lt;b&gt;", body)
        self.assertIn("a=1&amp;b=2", body)


class GetMailConnectionTestCase(TestCase):

    @override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
    def test_uses_settings_backend(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("EMAIL_BACKEND", None)
            connection = get_mail_connection()
        self.assertEqual(type(connection).__module__, "django.core.mail.backends.locmem")

    @mock.patch.dict(os.environ, {"EMAIL_BACKEND": "django.core.mail.backends.dummy.EmailBackend"})
    def test_environment_overrides_settings(self):
        connection = get_mail_connection()
        self.assertEqual(type(connection).__module__, "django.core.mail.backends.dummy")


class MailJobsTestCase(TestCase):

    def setUp(self):
        self.task = make_task(make_project())
        self.user = make_user("anna@example.org")

    def test_task_assigned_mail(self):
        result = send_task_assigned_email.delay(self.user.pk, self.task.pk).get()

        self.assertEqual(result, {"user_id": self.user.pk, "task_id": self.task.pk})
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, "Assigned to new task")
        self.assertEqual(message.to, ["anna@example.org"])
        self.assertEqual(message.content_subtype, "html")
        self.assertIn(f"https://lawnotation.test/annotate/{self.task.pk}?seq=1", message.body)
        self.assertTrue(EventLog.objects.filter(event_type="TASK_ASSIGNED_EMAIL_SENT").exists())

    def test_invitation_mail(self):
        send_invitation_email.delay(self.user.pk, self.task.pk)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Invitation to Lawnotation")
        self.assertTrue(EventLog.objects.filter(event_type="INVITATION_EMAIL_SENT").exists())


class IdentityProviderTestCase(TestCase):

    def setUp(self):
        self.task = make_task(make_project())

    def test_find_user_is_case_insensitive(self):
        user = make_user("Anna@Example.org")
        self.assertEqual(find_user_by_email("anna@example.org"), user)
        self.assertIsNone(find_user_by_email("nobody@example.org"))

    def test_invite_creates_passwordless_user(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            user = invite_user_by_email("new@example.org", self.task.pk)

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(user.email, "new@example.org")
        self.assertFalse(user.has_usable_password())
        self.assertEqual(user.profile.role, "annotator")
        self.assertEqual(user.profile.metadata, {"invited_task_id": self.task.pk})
        self.assertTrue(EventLog.objects.filter(event_type="USER_INVITED").exists())
        self.assertEqual(mail.outbox[0].to, ["new@example.org"])

    def test_invite_failure_raises_identity_error(self):
        with mock.patch.object(
            UserProfile.objects, "create", side_effect=DatabaseError("constraint")
        ):
            with self.assertRaises(IdentityProviderError):
                invite_user_by_email("new@example.org", self.task.pk)

    def test_update_metadata_merges(self):
        user = make_user("anna@example.org")
        UserProfile.objects.create(user=user, metadata={"invited_task_id": 1})

        profile = update_user_metadata(user, assigned_task_id=self.task.pk)

        self.assertEqual(
            profile.metadata, {"invited_task_id": 1, "assigned_task_id": self.task.pk}
        )

    def test_assign_existing_user(self):
        user = make_user("anna@example.org")

        with self.captureOnCommitCallbacks(execute=True):
            assigned = assign_user_to_task("anna@example.org", self.task.pk)

        self.assertEqual(assigned, user)
        self.assertEqual(user.profile.metadata, {"assigned_task_id": self.task.pk})
        self.assertEqual(mail.outbox[0].subject, "Assigned to new task")

    def test_assign_unknown_address_invites(self):
        with self.captureOnCommitCallbacks(execute=True):
            assigned = assign_user_to_task("carla@example.org", self.task.pk)

        self.assertEqual(assigned.profile.metadata, {"invited_task_id": self.task.pk})
        self.assertEqual(mail.outbox[0].subject, "Invitation to Lawnotation")
