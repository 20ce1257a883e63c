"""Container entrypoint: migrate, then start runserver or gunicorn.

``DJANGO_DEBUG`` selects the server once per process:

- debug: Django's ``runserver`` with auto-reload, verbose output and a debugpy
  listener for remote attachment;
- otherwise: gunicorn with cooperative ``gevent`` workers.

Failures are not retried; the exit code is left for the container
orchestrator's restart policy.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable

from django.core.management import call_command
from gunicorn.app.base import BaseApplication
from gunicorn.util import import_app

from django_demo import startup
from django_demo.config import RuntimeConfig, RuntimeMode, get_config
from django_demo.errors import ConfigurationError, MigrationError, ServerLaunchError
from django_demo.logging_setup import configure_logging
from django_demo.utils.logging_utils import structured_log

_LOG = logging.getLogger(__name__)

WSGI_APP = "django_demo.wsgi:application"


def select_mode(config: RuntimeConfig) -> RuntimeMode:
    return config.mode


def _when_ready(server) -> None:
    structured_log(
        _LOG,
        logging.INFO,
        "gunicorn_ready",
        bind=",".join(str(addr) for addr in server.LISTENERS) or None,
    )


def _worker_abort(worker) -> None:
    structured_log(_LOG, logging.ERROR, "gunicorn_worker_abort", pid=worker.pid)


def _on_exit(server) -> None:
    structured_log(_LOG, logging.INFO, "gunicorn_exit")


class GunicornApplication(BaseApplication):
    """Embed gunicorn so the entrypoint does not need a shell ``exec``."""

    def __init__(self, app_uri: str, options: dict[str, Any]) -> None:
        self.app_uri = app_uri
        self.options = options
        super().__init__()

    def load_config(self) -> None:
        for key, value in self.options.items():
            if key in self.cfg.settings and value is not None:
                self.cfg.set(key.lower(), value)

    def load(self):
        return import_app(self.app_uri)


def gunicorn_options(config: RuntimeConfig) -> dict[str, Any]:
    return {
        "bind": config.bind,
        "workers": config.gunicorn_workers,
        "worker_class": config.gunicorn_worker_class,
        "timeout": config.gunicorn_timeout,
        "graceful_timeout": 30,
        "keepalive": 5,
        "max_requests": 1000,
        "max_requests_jitter": 50,
        "reload": False,
        "accesslog": "-",
        "errorlog": "-",
        "loglevel": logging.getLevelName(config.log_level).lower(),
        "proc_name": "django-demo",
        "when_ready": _when_ready,
        "worker_abort": _worker_abort,
        "on_exit": _on_exit,
    }


def launch_development_server(config: RuntimeConfig) -> None:
    if startup.is_autoreload_child():
        startup.enable_remote_debugger(config)
    structured_log(
        _LOG,
        logging.INFO,
        "server_launch",
        mode=RuntimeMode.DEVELOPMENT.value,
        bind=config.bind,
        reload=True,
        debugger_port=config.debugger_port,
    )
    call_command("runserver", config.bind, use_reloader=True, verbosity=2)


def launch_production_server(config: RuntimeConfig) -> None:
    options = gunicorn_options(config)
    structured_log(
        _LOG,
        logging.INFO,
        "server_launch",
        mode=RuntimeMode.PRODUCTION.value,
        bind=config.bind,
        reload=False,
        workers=options["workers"],
        worker_class=options["worker_class"],
    )
    GunicornApplication(WSGI_APP, options).run()


def launch(config: RuntimeConfig) -> None:
    mode = select_mode(config)
    launcher: Callable[[RuntimeConfig], None] = (
        launch_development_server
        if mode is RuntimeMode.DEVELOPMENT
        else launch_production_server
    )
    try:
        launcher(config)
    except SystemExit:
        raise
    except Exception as exc:
        raise ServerLaunchError(f"{mode.value} server failed to start: {exc}") from exc


def main() -> int:
    configure_logging(force=True)
    config = get_config()
    configure_logging(level=config.log_level)
    structured_log(
        _LOG,
        logging.INFO,
        "service_bootstrap",
        mode=config.mode.value,
        debug_enabled=config.debug,
        port=config.port,
    )
    try:
        config.validate_required()
        startup.prepare_runtime(config)
        launch(config)
    except (ConfigurationError, MigrationError, ServerLaunchError) as exc:
        structured_log(
            _LOG,
            logging.ERROR,
            "startup_failed",
            error=str(exc),
            error_type=exc.__class__.__name__,
            exit_code=1,
        )
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised in runtime
    sys.exit(main())
