from django.apps import AppConfig


class AvatarsConfig(AppConfig):
    name = "avatars"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self) -> None:
        # Connect the lifecycle receivers and register the settings checks.
        from avatars import checks_avatars, signals  # noqa: F401
