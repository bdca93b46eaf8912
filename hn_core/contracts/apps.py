from django.apps import AppConfig


class ContractsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hn_core.contracts"

    def ready(self):
        # Registers event-bus subscribers
        import hn_core.contracts.subscribers  # noqa: F401
