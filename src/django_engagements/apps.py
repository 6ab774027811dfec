from django.apps import AppConfig


class DjangoEngagementsConfig(AppConfig):
    name = "django_engagements"
    verbose_name = "Engagements"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from . import checks  # noqa: F401
