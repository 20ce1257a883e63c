"""WSGI entrypoint for production deployments.

gunicorn imports ``application`` from here (``django_demo.wsgi:application``);
``django_demo.runtime_server`` is the normal way to start it inside the
container.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "django_demo.settings")

application = get_wsgi_application()
