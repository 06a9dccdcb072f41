from django.apps import AppConfig


class FormcraftAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "formcraft_app"
