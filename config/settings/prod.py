"""Production settings for the guest-house portal.

This module extends the base settings with production specific
configuration. Ensure that sensitive values are provided via
environment variables and that security settings are appropriate for
production use.
"""

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')  # noqa: F405

# Configure secure proxies and cookies
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True

if not os.environ.get('ENCRYPTION_KEY'):  # noqa: F405
    raise ImproperlyConfigured("ENCRYPTION_KEY must be set in production")

if not GUESTHOUSE_MAIL_API_KEY:  # noqa: F405
    import logging

    logging.getLogger(__name__).warning("GUESTHOUSE_MAIL_API_KEY is not set, applicant emails are disabled")
