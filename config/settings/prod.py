# config/settings/prod.py
from .base import *  # noqa

DEBUG = False

CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CC_CORS_ALLOWED_ORIGINS", "https://app.camcare.example").split(",")
    if origin.strip()
]
CORS_ALLOW_CREDENTIALS = True

SIMPLE_JWT["UPDATE_LAST_LOGIN"] = True

LOGGING["root"]["level"] = "WARNING"
