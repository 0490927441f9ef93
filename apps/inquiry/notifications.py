# apps/inquiry/notifications.py
"""
Best-effort email side effects of the inquiry workflow.

Called from transaction.on_commit, so the inquiry/response row is already
durable. A failure here is logged at ERROR and swallowed:
the stored inquiry is the source of truth.
"""
from __future__ import annotations

import logging

from django.conf import settings

logger = logging.getLogger(__name__)

CREATED = "created"
STAFF_REPLY = "staff_reply"
CUSTOMER_REPLY = "customer_reply"


def _dispatch(kind: str, inquiry_id: int, response_id: int | None = None) -> bool:
    if not getattr(settings, "NOTIFY_INQUIRIES", True):
        logger.debug("inquiry notifications disabled; skip %s for %s", kind, inquiry_id)
        return False

    from .tasks import send_inquiry_email

    try:
        send_inquiry_email.delay(inquiry_id, kind=kind, response_id=response_id)
    except Exception as exc:  # broker down, SMTP refused in eager mode, ...
        logger.error(
            "%s notification for inquiry %s failed: %s",
            kind,
            inquiry_id,
            exc,
            exc_info=True,
            extra={"inquiry_id": inquiry_id, "response_id": response_id, "notification": kind},
        )
        return False
    return True


def notify_inquiry_created(inquiry_id: int) -> bool:
    return _dispatch(CREATED, inquiry_id)


def notify_response_appended(response_id: int) -> bool:
    from .models import InquiryResponse

    response = InquiryResponse.objects.filter(pk=response_id).only("id", "inquiry_id", "sender").first()
    if response is None:
        return False
    kind = STAFF_REPLY if response.is_staff_reply else CUSTOMER_REPLY
    return _dispatch(kind, response.inquiry_id, response.pk)
