"""Django app configuration for api app."""

from django.apps import AppConfig


class ApiConfig(AppConfig):
    """Configuration for the HTTP JSON api app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.api'
    verbose_name = 'API'
