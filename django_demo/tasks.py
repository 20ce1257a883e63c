"""Celery application and the demo task.

Run the worker with::

    celery -A django_demo.tasks worker --loglevel=info

Broker and result backend come from Django settings (``CELERY_`` namespace),
which in turn come from :class:`django_demo.config.RuntimeConfig`.
"""

import logging
import os

from celery import Celery
from celery.exceptions import TimeoutError as CeleryTimeoutError
from kombu.exceptions import OperationalError

from django_demo.errors import TaskQueueTimeout, TaskQueueUnavailable
from django_demo.utils.logging_utils import structured_log

logger = logging.getLogger(__name__)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "django_demo.settings")

app = Celery("django_demo")
app.config_from_object("django.conf:settings", namespace="CELERY")


@app.task(name="django_demo.tasks.add")
def add(x, y):
    return x + y


def call_add(x, y, *, timeout):
    """Run :func:`add` on a worker and block for at most ``timeout`` seconds."""
    try:
        result = add.delay(x, y)
    except OperationalError as exc:
        structured_log(logger, logging.ERROR, "task_dispatch_failed", task=add.name, error=str(exc))
        raise TaskQueueUnavailable("Task broker is unreachable") from exc
    try:
        return result.get(timeout=timeout)
    except CeleryTimeoutError as exc:
        structured_log(
            logger,
            logging.WARNING,
            "task_result_timeout",
            task=add.name,
            task_id=result.id,
            timeout=timeout,
        )
        raise TaskQueueTimeout(f"No result from {add.name} within {timeout}s") from exc
