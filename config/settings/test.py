# config/settings/test.py
from .base import *  # noqa

DEBUG = False

# file-backed test database so threaded tests can share it
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
        "OPTIONS": {"timeout": 20},
        "TEST": {"NAME": BASE_DIR / "test_cc_core.sqlite3"},
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# keep retry loops fast under test
CC_SEQUENCE_BACKOFF_SECONDS = 0

LOGGING["loggers"]["cc_core"]["level"] = "WARNING"
