"""Test settings: in-memory SQLite, eager Celery, no outbound mail."""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

ENCRYPTION_KEY = 'test-encryption-key'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CACHES = {'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache'}}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

GUESTHOUSE_NAMESPACE = 'guesthouse-test'
GUESTHOUSE_MAIL_API_URL = 'https://mail.invalid/v3/smtp/email'
GUESTHOUSE_MAIL_API_KEY = ''
GUESTHOUSE_FEED_KEEPALIVE = 0.05
