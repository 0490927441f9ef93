from django.apps import AppConfig


class InquiryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.inquiry"
    label = "inquiry"
    verbose_name = "Inquiries"
