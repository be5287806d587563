"""Development settings for the guest-house portal.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts and running
Celery tasks in-process. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# No broker needed locally; emails go out (or are skipped without an API key) inline
CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'true').lower() == 'true'

LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
