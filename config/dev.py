# config/dev.py
from .base import *  # noqa

DEBUG = True

ALLOWED_HOSTS = env.list("DJANGO_ALLOWED_HOSTS", default=["localhost", "127.0.0.1", "testserver"])

# the marketplace front end runs on :3000 and links back to /inquiry and /signup there
FRONTEND_ORIGIN = env.str("FRONTEND_ORIGIN", default="http://localhost:3000")
CSRF_TRUSTED_ORIGINS = env.list("DJANGO_CSRF_TRUSTED_ORIGINS", default=[FRONTEND_ORIGIN])
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[FRONTEND_ORIGIN])
CORS_ALLOW_CREDENTIALS = True

# --- Inquiry mail stays local: printed to the console, never retried ---
EMAIL_BACKEND = env(
    "EMAIL_BACKEND",
    default="django.core.mail.backends.console.EmailBackend",
)
INQUIRY_NOTIFY_TO = env.list("INQUIRY_NOTIFY_TO", default=["support@localhost"])

# --- Celery: run send_inquiry_email inline (no broker) ---
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=True)
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# Chatty inquiry workflow logs while developing.
LOGGING["loggers"] = {
    "apps": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
}
