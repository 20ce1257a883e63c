"""Startup helpers run by the container entrypoint before a server is launched."""

from __future__ import annotations

import logging
import os

import debugpy
import django
from django.core.management import call_command
from django.db import connections
from django.utils.autoreload import DJANGO_AUTORELOAD_ENV

from django_demo.config import RuntimeConfig
from django_demo.errors import MigrationError
from django_demo.utils.logging_utils import log_stage_skipped, stage_marker, structured_log

_LOG = logging.getLogger(__name__)

SETTINGS_MODULE = "django_demo.settings"


def is_autoreload_child() -> bool:
    """True inside the process Django's autoreloader spawns to serve requests."""
    return os.environ.get(DJANGO_AUTORELOAD_ENV) == "true"


def setup_django() -> None:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", SETTINGS_MODULE)
    django.setup()


def run_migrations(config: RuntimeConfig) -> None:
    """Apply outstanding migrations; any failure aborts startup."""
    with stage_marker(_LOG, stage="migrate", mode=config.mode.value):
        try:
            call_command(
                "migrate",
                interactive=False,
                verbosity=2 if config.debug else 1,
            )
        except Exception as exc:
            raise MigrationError(f"Applying database migrations failed: {exc}") from exc


def enable_remote_debugger(config: RuntimeConfig) -> bool:
    """Listen for a debugpy client on ``config.debugger_port``.

    Returns False when the debugger could not be started; the server still
    launches in that case.
    """
    try:
        debugpy.listen((config.host, config.debugger_port))
    except Exception as exc:  # pylint: disable=broad-except
        structured_log(
            _LOG,
            logging.WARNING,
            "remote_debugger_unavailable",
            debugger_port=config.debugger_port,
            error=str(exc),
        )
        return False
    structured_log(
        _LOG,
        logging.INFO,
        "remote_debugger_listening",
        debugger_port=config.debugger_port,
    )
    if config.debugger_wait:
        _LOG.info("Waiting for debugpy client to attach on port %s", config.debugger_port)
        debugpy.wait_for_client()
    return True


def prepare_runtime(config: RuntimeConfig) -> None:
    """Set up Django and migrate exactly once per container start.

    Connections opened by ``migrate`` are closed before returning so gunicorn
    never forks workers that share the master's database socket.
    """
    setup_django()
    if is_autoreload_child():
        log_stage_skipped(_LOG, stage="migrate", reason="autoreload_child")
        return
    run_migrations(config)
    connections.close_all()


__all__ = [
    "enable_remote_debugger",
    "is_autoreload_child",
    "prepare_runtime",
    "run_migrations",
    "setup_django",
]
