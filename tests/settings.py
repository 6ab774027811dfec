"""Django settings for django-engagements tests."""

import tempfile
from pathlib import Path

DB_DIR = Path(tempfile.gettempdir())

SECRET_KEY = "test-secret-key-not-for-production"

DEBUG = True

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "tests.testapp",
    "django_engagements",
]

MIDDLEWARE = [
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
]

ROOT_URLCONF = "tests.urls"

# File-backed so threads share it; IMMEDIATE takes the write lock at BEGIN
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": str(DB_DIR / "django_engagements.sqlite3"),
        "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
        "TEST": {"NAME": str(DB_DIR / "test_django_engagements.sqlite3")},
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

# Collaborators backed by the test app
ENGAGEMENTS_RESOURCE_PROVIDER = "tests.testapp.providers.ListingProvider"
ENGAGEMENTS_PARTY_DIRECTORY = "tests.testapp.providers.MembershipDirectory"
ENGAGEMENTS_NOTIFIER = "tests.testapp.providers.RecordingNotifier"
ENGAGEMENTS_CHAT_PROVIDER = "tests.testapp.providers.RecordingChatProvider"
