import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "lawnotation.settings")

app = Celery("lawnotation")
app.config_from_object("django.conf:settings", namespace="CELERY")
# Celery jobs live in <app>/notifications.py.
app.autodiscover_tasks(related_name="notifications")
