"""Django project package for the guest-house booking portal.

Holds the per-environment settings (``config.settings``), the URL root,
the WSGI/ASGI entry points and the Celery app that sends applicant
emails.
"""

# Registers the Celery app so ``shared_task`` tasks bind to it.
from .celery import app as celery_app  # noqa: F401
