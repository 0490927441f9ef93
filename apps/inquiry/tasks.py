# apps/inquiry/tasks.py
from __future__ import annotations

import smtplib
from email.utils import formatdate
from typing import Optional

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string

from .models import Inquiry, InquiryResponse

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_FALLBACK_SUBJECTS = {
    "created": "【お問い合わせ】新しいお問い合わせが届きました",
    "staff_reply": "【お問い合わせ】ご返信が届きました",
    "customer_reply": "【お問い合わせ】お客様から返信が届きました",
}


def _render_subject_and_body(kind: str, ctx: dict) -> tuple[str, str]:
    """Render 'Subject: ...' on line 1, rest is body; fallback if template missing."""
    fallback_subject = _FALLBACK_SUBJECTS.get(kind, "【お問い合わせ】更新のお知らせ")
    try:
        raw = render_to_string(f"emails/inquiry/{kind}.txt", ctx)
    except TemplateDoesNotExist:
        return fallback_subject, ctx.get("message", "")
    lines = raw.splitlines()
    subject_line = lines[0].replace("Subject:", "").strip() if lines else ""
    body = "\n".join(lines[1:]).strip()
    return subject_line or fallback_subject, body or ctx.get("message", "")


def staff_recipients(inquiry: Inquiry) -> list[str]:
    """Company mailbox plus active members, or the platform operator for general inquiries."""
    if inquiry.company_id is None:
        candidates = list(getattr(settings, "INQUIRY_NOTIFY_TO", []))
    else:
        candidates = [inquiry.company.email]
        candidates += list(
            inquiry.company.members.filter(is_active=True)
            .exclude(user__email="")
            .values_list("user__email", flat=True)
        )

    seen: set[str] = set()
    out: list[str] = []
    for email in candidates:
        key = (email or "").strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(email.strip())
    return out


def recipients_for(kind: str, inquiry: Inquiry) -> list[str]:
    if kind == "staff_reply":
        return [inquiry.inquirer_email] if inquiry.inquirer_email else []
    return staff_recipients(inquiry)


# ---------------------------------------------------------------------------
# Outbound mail
# ---------------------------------------------------------------------------

@shared_task(bind=True, max_retries=2)
def send_inquiry_email(
    self,
    inquiry_id: int,
    kind: str = "created",                      # 'created' | 'staff_reply' | 'customer_reply'
    response_id: Optional[int] = None,
    to_override: Optional[list[str]] = None,    # custom recipients (tests/admin)
):
    """Email the other side of the conversation about a new inquiry or reply."""
    inquiry = Inquiry.objects.select_related("company").filter(id=inquiry_id).first()
    if inquiry is None:
        # deleted (company/customer cascade) before the worker picked it up
        return {"skipped": True, "reason": "inquiry gone", "inquiry": inquiry_id}

    response = None
    if response_id is not None:
        response = InquiryResponse.objects.filter(id=response_id, inquiry_id=inquiry.id).first()

    to_list = to_override or recipients_for(kind, inquiry)
    if not to_list:
        return {"skipped": True, "reason": "no recipient email", "inquiry": inquiry.id}

    ctx = {
        "inquiry_id": inquiry.id,
        "inquirer_name": inquiry.inquirer_name,
        "inquirer_email": inquiry.inquirer_email,
        "inquirer_phone": inquiry.inquirer_phone,
        "company_name": inquiry.company.name if inquiry.company_id else "",
        "message": inquiry.message,
        "reply_message": response.message if response else "",
        "sender_name": response.sender_name if response else "",
        "kind": kind,
    }
    subject, body = _render_subject_and_body(kind, ctx)

    msg = EmailMessage(
        subject=subject,
        body=body,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", "no-reply@koumuten-match.local"),
        to=to_list,
    )
    msg.extra_headers = {
        "Date": formatdate(localtime=True),
        "X-Entity-Ref-ID": f"inquiry-{inquiry.id}",
    }

    try:
        msg.send(fail_silently=False)
    except (smtplib.SMTPException, OSError) as exc:
        raise self.retry(exc=exc, countdown=60)
    return {"sent": True, "to": to_list, "kind": kind, "inquiry": inquiry.id}
