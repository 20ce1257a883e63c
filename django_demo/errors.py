"""Custom exception hierarchy for the django-docker-demo runtime.

Fatal start-up errors are mapped to process exit codes by the entrypoint;
task-queue errors are mapped to HTTP status codes by the error middleware so a
slow or missing worker never takes the web process down.
"""
from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when the runtime environment is inconsistent or incomplete."""


class MigrationError(Exception):
    """Raised when applying database migrations fails; startup is aborted."""


class ServerLaunchError(Exception):
    """Raised when the selected application server cannot be started."""


class TaskQueueTimeout(Exception):
    """Raised when a Celery result does not arrive within the configured timeout."""


class TaskQueueUnavailable(Exception):
    """Raised when the Celery broker cannot be reached."""


__all__ = [
    "ConfigurationError",
    "MigrationError",
    "ServerLaunchError",
    "TaskQueueTimeout",
    "TaskQueueUnavailable",
]
