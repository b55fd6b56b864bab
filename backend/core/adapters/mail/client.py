import os
from django.conf import settings
from django.core.mail import get_connection


def get_mail_connection(fail_silently: bool = False):
    backend = os.getenv(
        "EMAIL_BACKEND",
        getattr(
            settings,
            "EMAIL_BACKEND",
            "django.core.mail.backends.smtp.EmailBackend",
        ),
    )
    return get_connection(backend=backend, fail_silently=fail_silently)
