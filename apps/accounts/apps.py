from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.accounts"     # full dotted path (app lives under apps/)
    label = "accounts"         # AUTH_USER_MODEL points at this label
    verbose_name = "Accounts & role profiles"

    def ready(self):
        # login/logout audit receivers
        from . import signals  # noqa: F401
