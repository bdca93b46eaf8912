from django.apps import AppConfig


class IamConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hn_core.iam"
    verbose_name = "Identity and access"

    def ready(self) -> None:
        # Registers the drf-spectacular auth extension
        from hn_core.iam import openapi  # noqa: F401
