"""Django settings, derived from the process-wide :class:`RuntimeConfig`."""

from __future__ import annotations

from django_demo.config import BASE_DIR, get_config
from django_demo.logging_setup import django_logging_config

_CONFIG = get_config()

DEBUG = _CONFIG.debug
SECRET_KEY = _CONFIG.secret_key
ALLOWED_HOSTS = _CONFIG.allowed_hosts

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.staticfiles",
]

MIDDLEWARE = [
    "django_demo.middleware.RequestIdMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django_demo.middleware.TaskQueueErrorMiddleware",
]

ROOT_URLCONF = "django_demo.urls"
WSGI_APPLICATION = "django_demo.wsgi.application"

DATABASES = {"default": _CONFIG.database_settings()}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

# nginx serves STATIC_ROOT directly; the app only collects into it.
STATIC_URL = "/static/"
STATIC_ROOT = str(_CONFIG.static_root)

LOGGING = django_logging_config(_CONFIG.log_level)

CELERY_BROKER_URL = _CONFIG.broker_url
CELERY_RESULT_BACKEND = _CONFIG.result_backend
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_TRACK_STARTED = True
CELERY_WORKER_HIJACK_ROOT_LOGGER = False
TASK_RESULT_TIMEOUT = _CONFIG.task_timeout
