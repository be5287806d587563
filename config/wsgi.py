"""WSGI entry point for the guest-house booking portal.

Each open admin live feed holds one worker thread for as long as the
client stays connected, so run a threaded server (for example gunicorn
with ``--threads``) or serve the portal through ``config.asgi``.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_wsgi_application()
