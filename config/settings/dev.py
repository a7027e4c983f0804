"""Development settings for Slotbook.

Extends the base settings with debug enabled, all hosts allowed and
Celery tasks executed inline so no broker is needed locally. Do not use
these settings in production!
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'true').lower() == 'true'  # noqa: F405
