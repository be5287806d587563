"""ASGI entry point for the guest-house booking portal.

The admin live feed streams from an async generator here, so an open feed
does not pin a worker thread.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
