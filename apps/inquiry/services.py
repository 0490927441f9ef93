# apps/inquiry/services.py
"""
Inquiry store, response thread and status controller.

Every operation takes the acting role explicitly (see apps.rbac.actors)
and raises the domain errors from apps.core.exceptions; API views never
re-check ownership themselves.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, FrozenSet, Optional, Tuple
from urllib.parse import urlencode

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from apps.companies.models import Company, ConstructionCase
from apps.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from apps.rbac.actors import (
    STAFF_ACTORS,
    AdminActor,
    CustomerActor,
    MemberActor,
    unknown_actor,
)

from . import notifications
from .models import Inquiry, InquiryQuerySet, InquiryResponse, InquiryStatus, ResponseSender

logger = logging.getLogger(__name__)

GENERAL = "general"
COMPANY = "company"
INQUIRY_KINDS = {GENERAL, COMPANY}

# Status is a permissive label: any state may move to any other state.
# Tighten here if product ever wants a strict progression.
ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    state: frozenset(InquiryStatus.values) - {state} for state in InquiryStatus.values
}

_UNSET = object()


# ---- Normalizers ----

def normalize_text(value) -> str:
    return str(value).strip() if value is not None else ""


def normalize_email(value) -> str:
    return normalize_text(value).lower()


def parse_status(value) -> str:
    status = normalize_text(value)
    if status not in InquiryStatus.values:
        raise ValidationError(
            f"Unknown status '{status}'. Use one of: {', '.join(InquiryStatus.values)}.",
            field="status",
        )
    return status


def _as_id(value, field: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer.", field=field)


# ---- Access gating & prefill ----

@dataclass
class InquiryPrefill:
    name: str = ""
    email: str = ""
    phone: str = ""
    # locked fields are shown read-only and always taken from the profile
    locked: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


def prefill_for(actor, *, company_directed: bool) -> InquiryPrefill:
    """
    Requester fields for the inquiry form.

    A customer contacting a company gets their whole profile, locked.
    A logged-in customer writing to the platform only gets their email.
    """
    if actor is None:
        return InquiryPrefill()
    if isinstance(actor, CustomerActor):
        if company_directed:
            return InquiryPrefill(name=actor.name, email=actor.email, phone=actor.phone, locked=True)
        return InquiryPrefill(email=actor.email)
    if isinstance(actor, STAFF_ACTORS):
        return InquiryPrefill()
    raise unknown_actor(actor)


def signup_redirect_url(*, company_id: int, case_id: Optional[int] = None) -> str:
    """Sign-up URL that brings the visitor back to the same inquiry form."""
    params = {"companyId": company_id}
    if case_id:
        params["caseId"] = case_id
    destination = f"{settings.INQUIRY_FORM_PATH}?{urlencode(params)}"
    return f"{settings.SIGNUP_URL}?{urlencode({'redirect': destination})}"


def resolve_target(company_id=None, case_id=None) -> Tuple[Optional[Company], Optional[ConstructionCase]]:
    company_pk = _as_id(company_id, "company_id")
    case_pk = _as_id(case_id, "case_id")

    company = None
    if company_pk is not None:
        company = Company.objects.filter(pk=company_pk).first()
        if company is None:
            raise ValidationError("The selected company does not exist.", field="company_id")

    case = None
    if case_pk is not None:
        if company is None:
            raise ValidationError("A case can only be referenced together with its company.", field="case_id")
        case = ConstructionCase.objects.filter(pk=case_pk, company=company).first()
        if case is None:
            raise ValidationError("The selected case does not belong to this company.", field="case_id")
    return company, case


# ---- Inquiry store ----

def submit_inquiry(
    *,
    message,
    inquirer_name="",
    inquirer_email="",
    inquirer_phone="",
    company_id=None,
    case_id=None,
    actor=None,
) -> Inquiry:
    """
    Create an inquiry in NEW.

    `actor` is the logged-in requester, if any. Company-directed
    inquiries require a customer; their requester fields come from the
    customer profile.
    """
    if actor is not None and not isinstance(actor, (AdminActor, MemberActor, CustomerActor)):
        raise unknown_actor(actor)

    company, case = resolve_target(company_id, case_id)
    customer_id = actor.customer_id if isinstance(actor, CustomerActor) else None
    if company is not None and customer_id is None:
        raise AuthorizationError("Sign up or log in as a customer to contact a company.")

    name = normalize_text(inquirer_name)
    email = normalize_email(inquirer_email)
    phone = normalize_text(inquirer_phone)

    prefill = prefill_for(actor, company_directed=company is not None)
    if prefill.locked:
        name = prefill.name or name
        email = normalize_email(prefill.email) or email
        phone = prefill.phone or phone
    else:
        name = name or prefill.name
        email = email or normalize_email(prefill.email)
        phone = phone or prefill.phone

    text = normalize_text(message)
    if not text:
        raise ValidationError("Message is required.", field="message")
    if not name:
        raise ValidationError("Name is required.", field="inquirer_name")
    if not email:
        raise ValidationError("Email is required.", field="inquirer_email")
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Enter a valid email address.", field="inquirer_email")

    with transaction.atomic():
        inquiry = Inquiry.objects.create(
            company=company,
            customer_id=customer_id,
            case=case,
            inquirer_name=name,
            inquirer_email=email,
            inquirer_phone=phone,
            message=text,
            status=InquiryStatus.NEW,
        )
        transaction.on_commit(lambda: notifications.notify_inquiry_created(inquiry.pk))

    logger.info(
        "inquiry %s submitted (%s)",
        inquiry.pk,
        f"company {company.pk}" if company else GENERAL,
        extra={"inquiry_id": inquiry.pk, "company_id": getattr(company, "pk", None), "customer_id": customer_id},
    )
    return inquiry


def scoped_inquiries(actor, *, kind: Optional[str] = None) -> InquiryQuerySet:
    """
    Inquiries the actor may see.
      - admin: everything, or only general/company-directed when `kind` is set
      - member: their company's inquiries
      - customer: inquiries linked to their account
    """
    if kind is not None and kind not in INQUIRY_KINDS:
        raise ValueError(f"Unknown inquiry kind: {kind}")

    qs = Inquiry.objects.all()
    if isinstance(actor, AdminActor):
        if kind == GENERAL:
            return qs.general()
        if kind == COMPANY:
            return qs.company_directed()
        return qs
    if isinstance(actor, MemberActor):
        return qs.for_company(actor.company_id)
    if isinstance(actor, CustomerActor):
        return qs.for_customer(actor.customer_id)
    raise unknown_actor(actor)


def list_inquiries(actor, *, status=None, kind: Optional[str] = None) -> InquiryQuerySet:
    qs = scoped_inquiries(actor, kind=kind).with_thread()
    if status not in (None, "", "all"):
        qs = qs.with_status(parse_status(status))
    return qs


def get_inquiry(actor, inquiry_id, *, kind: Optional[str] = None) -> Inquiry:
    """Detail with thread. Missing and out-of-scope ids look the same."""
    pk = _as_id(inquiry_id, "inquiry_id")
    inquiry = scoped_inquiries(actor, kind=kind).with_thread().filter(pk=pk).first()
    if inquiry is None:
        raise NotFoundError("Inquiry not found.")
    return inquiry


def status_summary(actor, *, kind: Optional[str] = None) -> Dict[str, int]:
    """Per-status counts for the actor's dashboard."""
    qs = scoped_inquiries(actor, kind=kind)
    counts = {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id")).order_by()}
    start_of_month = timezone.localtime().replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    summary = {"total": sum(counts.values())}
    for state in InquiryStatus.values:
        summary[state.lower()] = counts.get(state, 0)
    summary["this_month"] = qs.filter(created_at__gte=start_of_month).count()
    return summary


# ---- Status controller & staff edits ----

def _load_for_update(inquiry_id) -> Inquiry:
    pk = _as_id(inquiry_id, "inquiry_id")
    inquiry = Inquiry.objects.select_for_update().filter(pk=pk).first()
    if inquiry is None:
        raise NotFoundError("Inquiry not found.")
    return inquiry


def _deny(actor, inquiry: Inquiry, action: str, reason: str):
    logger.warning(
        "authorization failure: %s %s on inquiry %s (%s)",
        actor.role,
        action,
        inquiry.pk,
        reason,
        extra={"inquiry_id": inquiry.pk, "actor_role": actor.role, "actor_user_id": actor.user_id},
    )
    raise AuthorizationError(f"Not allowed to {action.replace('_', ' ')} on this inquiry.")


def _authorize_staff(actor, inquiry: Inquiry, action: str) -> None:
    if isinstance(actor, AdminActor):
        return
    if isinstance(actor, MemberActor):
        if inquiry.company_id is not None and inquiry.company_id == actor.company_id:
            return
        _deny(actor, inquiry, action, "inquiry belongs to another company")
    if isinstance(actor, CustomerActor):
        _deny(actor, inquiry, action, "staff only")
    raise unknown_actor(actor)


def _set_status(inquiry: Inquiry, status: str) -> bool:
    if inquiry.status == status:
        return False
    if status not in ALLOWED_TRANSITIONS[inquiry.status]:
        raise ValidationError(f"Cannot move from {inquiry.status} to {status}.", field="status")
    inquiry.status = status
    return True


def update_status(actor, inquiry_id, new_status) -> Inquiry:
    """Staff only. Setting the current status again succeeds without writing."""
    status = parse_status(new_status)
    with transaction.atomic():
        inquiry = _load_for_update(inquiry_id)
        _authorize_staff(actor, inquiry, "update_status")
        previous = inquiry.status
        if _set_status(inquiry, status):
            inquiry.save(update_fields=["status", "updated_at"])
            logger.info("inquiry %s status %s -> %s by %s", inquiry.pk, previous, status, actor.role)
    return inquiry


def update_notes(actor, inquiry_id, notes) -> Inquiry:
    """Staff only. Overwrites the notes verbatim; no history is kept."""
    with transaction.atomic():
        inquiry = _load_for_update(inquiry_id)
        _authorize_staff(actor, inquiry, "update_notes")
        inquiry.internal_notes = "" if notes is None else str(notes)
        inquiry.save(update_fields=["internal_notes", "updated_at"])
    return inquiry


def apply_staff_update(actor, inquiry_id, *, status=_UNSET, internal_notes=_UNSET) -> Inquiry:
    """Status and/or notes in one write, as the console PATCH sends them."""
    new_status = parse_status(status) if status is not _UNSET else None
    with transaction.atomic():
        inquiry = _load_for_update(inquiry_id)
        _authorize_staff(actor, inquiry, "update_inquiry")
        fields = []
        if new_status is not None and _set_status(inquiry, new_status):
            fields.append("status")
        if internal_notes is not _UNSET:
            inquiry.internal_notes = "" if internal_notes is None else str(internal_notes)
            fields.append("internal_notes")
        if fields:
            inquiry.save(update_fields=fields + ["updated_at"])
    return inquiry


# ---- Response thread ----

def sender_for(actor) -> str:
    if isinstance(actor, AdminActor):
        return ResponseSender.ADMIN
    if isinstance(actor, MemberActor):
        return ResponseSender.MEMBER
    if isinstance(actor, CustomerActor):
        return ResponseSender.CUSTOMER
    raise unknown_actor(actor)


def _authorize_thread(actor, inquiry: Inquiry) -> None:
    if isinstance(actor, CustomerActor):
        if inquiry.customer_id is not None and inquiry.customer_id == actor.customer_id:
            return
        _deny(actor, inquiry, "reply", "inquiry belongs to another requester")
    _authorize_staff(actor, inquiry, "reply")


def append_response(actor, inquiry_id, message, *, sender=None, sender_name=None) -> InquiryResponse:
    """
    Append one message to the inquiry thread.

    The sender role is derived from the actor; passing a different
    `sender` is an authorization failure. The first staff reply stamps
    `responded_at` and, with INQUIRY_AUTO_ADVANCE_ON_REPLY, moves a NEW
    inquiry to IN_PROGRESS, all in the same transaction.
    """
    text = normalize_text(message)
    if not text:
        raise ValidationError("Message is required.", field="message")

    role_sender = sender_for(actor)
    if sender not in (None, ""):
        requested = normalize_text(sender).upper()
        if requested not in ResponseSender.values:
            raise ValidationError(f"Unknown sender '{requested}'.", field="sender")
        if requested != role_sender:
            raise AuthorizationError(f"A {actor.role} cannot reply as {requested}.")

    with transaction.atomic():
        inquiry = _load_for_update(inquiry_id)
        _authorize_thread(actor, inquiry)

        # row lock above serializes appends; keep the thread non-decreasing
        created_at = timezone.now()
        last = inquiry.responses.order_by("-created_at").values_list("created_at", flat=True).first()
        if last is not None and last > created_at:
            created_at = last

        response = InquiryResponse.objects.create(
            inquiry=inquiry,
            sender=role_sender,
            sender_name=normalize_text(sender_name) or actor.name,
            message=text,
            created_at=created_at,
        )

        fields = ["updated_at"]
        if response.is_staff_reply:
            if inquiry.responded_at is None:
                inquiry.responded_at = created_at
                fields.append("responded_at")
            if (
                getattr(settings, "INQUIRY_AUTO_ADVANCE_ON_REPLY", True)
                and inquiry.status == InquiryStatus.NEW
            ):
                inquiry.status = InquiryStatus.IN_PROGRESS
                fields.append("status")
        inquiry.save(update_fields=fields)

        transaction.on_commit(lambda: notifications.notify_response_appended(response.pk))

    logger.info(
        "inquiry %s reply %s by %s",
        inquiry.pk,
        response.pk,
        role_sender,
        extra={"inquiry_id": inquiry.pk, "response_id": response.pk, "sender": role_sender},
    )
    return response
