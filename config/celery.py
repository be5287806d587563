import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("guesthouse")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Applicant emails are fire-and-forget: keep no results around
app.conf.task_ignore_result = True
app.conf.timezone = "Asia/Kolkata"
