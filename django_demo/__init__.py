"""Django project for the django-docker-demo containers."""
