"""WSGI config for the ground booking service.

Exposes the WSGI application for Django's runserver and production WSGI
servers, pointing at our settings package.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_wsgi_application()
