"""
WSGI config for the HealthMe escrow backend.

Provided as a fallback for traditional WSGI servers; the primary entry point
is config.asgi under Uvicorn.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
