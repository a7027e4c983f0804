"""Test settings for Slotbook.

In-memory SQLite unless DB_ENGINE points elsewhere (the concurrent
reservation tests only run against PostgreSQL), eager Celery and an
in-memory notifier.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

BOOKING_NOTIFIER = 'apps.bookings.notifications.MemoryNotifier'

LOGGING['root']['level'] = 'CRITICAL'  # noqa: F405
for _logger in LOGGING['loggers'].values():  # noqa: F405
    _logger['level'] = 'CRITICAL'
