import logging

from apps.audit.models import AuditEvent
from apps.rbac.actors import actor_for_user

logger = logging.getLogger("apps.audit")


def _client_ip(request) -> str | None:
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_event(request, action: str, object_type: str = "", object_id: str | int | None = None) -> AuditEvent:
    # single insert path so every audit row has the same shape
    user = getattr(request, "user", None)
    authenticated = bool(user and user.is_authenticated)
    actor = actor_for_user(user) if authenticated else None

    event = AuditEvent.objects.create(
        actor=user if authenticated else None,
        actor_role=actor.role if actor else "",
        action=action,
        object_type=object_type,
        object_id=str(object_id or ""),
        ip=_client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
    )
    level = logging.WARNING if action.startswith("authz.") else logging.INFO
    logger.log(
        level,
        "audit %s %s:%s",
        action,
        object_type,
        event.object_id,
        extra={"audit_action": action, "actor_role": event.actor_role, "ip": event.ip},
    )
    return event
