from django.apps import AppConfig


class OrgTreeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "django_orgtree"
    verbose_name = "Organization tree"

    def ready(self) -> None:  # pragma: no cover - import side effects
        from . import signals  # noqa: F401
