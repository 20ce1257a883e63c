from __future__ import annotations

import os

import django
import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "django_demo.settings")
os.environ["DJANGO_SQLITE_PATH"] = ":memory:"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
for _name in ("DJANGO_DEBUG", "DJANGO_DB_HOST", "RUN_MAIN"):
    os.environ.pop(_name, None)

django.setup()

from django_demo.config import get_config  # noqa: E402

RUNTIME_ENV_VARS = (
    "DJANGO_DEBUG",
    "DJANGO_HOST",
    "PORT",
    "DEBUGPY_PORT",
    "DEBUGPY_WAIT_FOR_CLIENT",
    "GUNICORN_WORKERS",
    "GUNICORN_WORKER_CLASS",
    "DJANGO_DB_HOST",
    "DJANGO_DB_USER",
    "DJANGO_DB_DATABASE",
    "CELERY_TASK_TIMEOUT",
    "LOG_LEVEL",
    "RUN_MAIN",
)


@pytest.fixture(autouse=True)
def _clean_runtime_env(monkeypatch):
    for name in RUNTIME_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()
