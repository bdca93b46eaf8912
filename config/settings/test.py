# config/settings/test.py
from .base import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CONTRACTS = {
    "NOTES_MIN_LENGTH": 5,
    "SIGNATURE_TOKEN_REQUIRED": False,
    "HISTORY_LIMIT": 500,
}

LOGGING["loggers"]["hn_core"]["level"] = "WARNING"
