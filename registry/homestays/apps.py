from django.apps import AppConfig


class HomestaysConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'registry.homestays'

    def ready(self):
        from . import signals  # noqa: F401
