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

LOGGING["root"]["level"] = "CRITICAL"  # noqa: F405
LOGGING["loggers"]["django"]["level"] = "CRITICAL"  # noqa: F405
LOGGING["loggers"]["exam_core"]["handlers"] = []  # noqa: F405
LOGGING["loggers"]["exam_core"]["propagate"] = True  # noqa: F405
