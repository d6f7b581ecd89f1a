from django.apps import AppConfig


class StaffConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "example_project.staff"

    def ready(self):
        from example_project.staff.signals import connect_member_signals

        connect_member_signals()
