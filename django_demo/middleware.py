"""Request-scoped middleware: request id propagation and task-queue error mapping."""

from __future__ import annotations

import logging
import uuid

from django.http import JsonResponse

from django_demo.errors import TaskQueueTimeout, TaskQueueUnavailable
from django_demo.logging_setup import set_request_id
from django_demo.utils.logging_utils import structured_log

_LOG = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_BY_ERROR = {
    TaskQueueTimeout: 504,
    TaskQueueUnavailable: 503,
}


class RequestIdMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(rid)
        try:
            response = self.get_response(request)
        finally:
            set_request_id(None)
        response[REQUEST_ID_HEADER] = rid
        return response


class TaskQueueErrorMiddleware:
    """Turn task-queue failures into JSON errors instead of 500s."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        status = _STATUS_BY_ERROR.get(type(exception))
        if status is None:
            return None
        structured_log(
            _LOG,
            logging.WARNING,
            "task_queue_error",
            path=request.path,
            method=request.method,
            status_code=status,
            error_type=exception.__class__.__name__,
        )
        return JsonResponse({"detail": str(exception)}, status=status)
