"""Development settings for the ground booking service.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts, a local
memory cache and the console email backend. Do not use these settings
in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# No Redis needed to run the app locally
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

# Use console email backend during development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
