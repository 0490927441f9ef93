# apps/accounts/signals.py
from django.contrib.auth.signals import (
    user_logged_in,
    user_logged_out,
    user_login_failed,
)
from django.dispatch import receiver

from apps.audit.utils import log_event


@receiver(user_logged_in)
def audit_login(sender, request, user, **kwargs):
    # token logins (simplejwt) bypass this signal; session logins only
    if request is not None:
        log_event(request, "auth.login", "User", user.id)


@receiver(user_logged_out)
def audit_logout(sender, request, user, **kwargs):
    if request is not None:
        log_event(request, "auth.logout", "User", getattr(user, "id", ""))


@receiver(user_login_failed)
def audit_login_failed(sender, credentials, request=None, **kwargs):
    # never store the attempted password; the identifier is enough
    if request is None:
        return
    identifier = (credentials or {}).get("username") or (credentials or {}).get("email", "")
    log_event(request, "auth.login_failed", "Auth", identifier)
