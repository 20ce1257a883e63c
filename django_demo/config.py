"""Runtime configuration for the django-docker-demo containers.

Every process (web entrypoint, Celery worker, management commands) builds a
single :class:`RuntimeConfig` from the environment at start-up and hands it to
the code that needs it instead of reading ``os.environ`` ad hoc.

Environment variables (defaults in brackets):
 - DJANGO_DEBUG [unset -> production]
 - DJANGO_HOST [0.0.0.0], PORT [8000]
 - DEBUGPY_PORT [5678], DEBUGPY_WAIT_FOR_CLIENT [false]
 - GUNICORN_WORKERS [2], GUNICORN_WORKER_CLASS [gevent], GUNICORN_TIMEOUT [30]
 - DJANGO_DB_HOST / DJANGO_DB_PORT / DJANGO_DB_DATABASE / DJANGO_DB_USER /
   DJANGO_DB_PASSWORD (SQLite is used when DJANGO_DB_HOST is unset)
 - CELERY_BROKER_URL / CELERY_RESULT_BACKEND / CELERY_TASK_TIMEOUT
"""
from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, AliasChoices, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

from django_demo.errors import ConfigurationError

_LOG = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

TRUTHY_DEBUG_VALUES: frozenset[str] = frozenset({"true", "True", "TRUE", "1"})
FALSY_DEBUG_VALUES: frozenset[str] = frozenset({"", "false", "False", "FALSE", "0"})

_INSECURE_DEV_SECRET = "django-insecure-demo-key-change-me"


class RuntimeMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


def parse_debug_flag(value: str | None) -> bool:
    """Strictly parse the ``DJANGO_DEBUG`` flag.

    Only the literal encodings in ``TRUTHY_DEBUG_VALUES`` enable debug mode.
    Unrecognised values fall back to production and are logged so a typo such
    as ``yes`` is visible in the container output.
    """
    if value is None:
        return False
    if value in TRUTHY_DEBUG_VALUES:
        return True
    if value not in FALSY_DEBUG_VALUES:
        _LOG.warning(
            "debug_flag_unrecognised",
            extra={"value": value, "accepted": sorted(TRUTHY_DEBUG_VALUES)},
        )
    return False


class RuntimeConfig(BaseSettings):
    debug_raw: str | None = Field(None, validation_alias="DJANGO_DEBUG")
    host: str = Field("0.0.0.0", validation_alias="DJANGO_HOST")
    port: int = Field(8000, validation_alias="PORT")
    debugger_port: int = Field(5678, validation_alias="DEBUGPY_PORT")
    debugger_wait: bool = Field(False, validation_alias="DEBUGPY_WAIT_FOR_CLIENT")
    gunicorn_workers: int = Field(2, validation_alias="GUNICORN_WORKERS")
    gunicorn_worker_class: str = Field("gevent", validation_alias="GUNICORN_WORKER_CLASS")
    gunicorn_timeout: int = Field(30, validation_alias="GUNICORN_TIMEOUT")
    secret_key: str = Field(_INSECURE_DEV_SECRET, validation_alias="DJANGO_SECRET_KEY")
    allowed_hosts_raw: str = Field("*", validation_alias="DJANGO_ALLOWED_HOSTS")
    db_host: str | None = Field(None, validation_alias="DJANGO_DB_HOST")
    db_port: int = Field(3306, validation_alias="DJANGO_DB_PORT")
    db_name: str = Field("django", validation_alias=AliasChoices("DJANGO_DB_DATABASE", "DJANGO_DB_NAME"))
    db_user: str = Field("", validation_alias="DJANGO_DB_USER")
    db_password: str = Field("", validation_alias="DJANGO_DB_PASSWORD")
    sqlite_path: Path = Field(BASE_DIR / "db.sqlite3", validation_alias="DJANGO_SQLITE_PATH")
    broker_url: str = Field("redis://redis:6379/0", validation_alias="CELERY_BROKER_URL")
    result_backend: str = Field("redis://redis:6379/0", validation_alias="CELERY_RESULT_BACKEND")
    task_timeout: float = Field(5.0, validation_alias="CELERY_TASK_TIMEOUT")
    static_root: Path = Field(BASE_DIR / "static", validation_alias="DJANGO_STATIC_ROOT")
    log_level_raw: str = Field("INFO", validation_alias="LOG_LEVEL")

    _debug: bool = PrivateAttr(False)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    def model_post_init(self, __context: Any) -> None:  # pylint: disable=W0221
        """Decide the runtime mode once; later reads never re-parse the flag."""
        self._debug = parse_debug_flag(self.debug_raw)

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def mode(self) -> RuntimeMode:
        return RuntimeMode.DEVELOPMENT if self.debug else RuntimeMode.PRODUCTION

    @property
    def bind(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def allowed_hosts(self) -> list[str]:
        return [host.strip() for host in self.allowed_hosts_raw.split(",") if host.strip()]

    @property
    def log_level(self) -> int:
        if self.debug:
            return logging.DEBUG
        level = logging.getLevelName(self.log_level_raw.strip().upper())
        return level if isinstance(level, int) else logging.INFO

    def database_settings(self) -> dict[str, object]:
        """Return the ``DATABASES['default']`` entry for Django."""
        if not self.db_host:
            return {"ENGINE": "django.db.backends.sqlite3", "NAME": str(self.sqlite_path)}
        return {
            "ENGINE": "django.db.backends.mysql",
            "HOST": self.db_host,
            "PORT": str(self.db_port),
            "NAME": self.db_name,
            "USER": self.db_user,
            "PASSWORD": self.db_password,
            "OPTIONS": {"charset": "utf8mb4"},
        }

    def validate_required(self) -> None:
        if not self.debug and self.secret_key == _INSECURE_DEV_SECRET:
            _LOG.warning("insecure_secret_key", extra={"mode": self.mode.value})
        if self.db_host and not (self.db_user and self.db_name):
            raise ConfigurationError(
                "DJANGO_DB_USER and DJANGO_DB_DATABASE must be set when DJANGO_DB_HOST is configured"
            )
        if self.task_timeout <= 0:
            raise ConfigurationError("CELERY_TASK_TIMEOUT must be a positive number of seconds")


@lru_cache
def get_config() -> RuntimeConfig:
    return RuntimeConfig()  # type: ignore[call-arg]


__all__ = [
    "RuntimeConfig",
    "RuntimeMode",
    "get_config",
    "parse_debug_flag",
    "TRUTHY_DEBUG_VALUES",
]
