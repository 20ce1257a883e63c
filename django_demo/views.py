from django.conf import settings
from django.http import JsonResponse

from django_demo import tasks


def _health_payload() -> dict[str, str]:
    return {"status": "ok"}


def healthz(request):
    return JsonResponse(_health_payload())


def index(request):
    value = tasks.call_add(2, 3, timeout=settings.TASK_RESULT_TIMEOUT)
    return JsonResponse({"result": value})
