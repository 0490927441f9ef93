# apps/inquiry/models.py
from __future__ import annotations

from django.db import models
from django.db.models import Q
from django.utils import timezone


class InquiryStatus(models.TextChoices):
    NEW = "NEW", "新規"
    IN_PROGRESS = "IN_PROGRESS", "対応中"
    RESOLVED = "RESOLVED", "解決済み"
    CLOSED = "CLOSED", "クローズ"


class ResponseSender(models.TextChoices):
    ADMIN = "ADMIN", "運営"
    MEMBER = "MEMBER", "工務店"
    CUSTOMER = "CUSTOMER", "お客様"


STAFF_SENDERS = {ResponseSender.ADMIN.value, ResponseSender.MEMBER.value}


# ------------ QuerySet / Manager helpers ------------ #

class InquiryQuerySet(models.QuerySet):
    def general(self) -> "InquiryQuerySet":
        """Addressed to the platform operator."""
        return self.filter(company__isnull=True)

    def company_directed(self) -> "InquiryQuerySet":
        return self.filter(company__isnull=False)

    def for_company(self, company_id: int) -> "InquiryQuerySet":
        return self.filter(company_id=company_id)

    def for_customer(self, customer_id: int) -> "InquiryQuerySet":
        return self.filter(customer_id=customer_id)

    def with_status(self, status: str) -> "InquiryQuerySet":
        return self.filter(status=status)

    def with_thread(self) -> "InquiryQuerySet":
        return self.select_related("company", "customer__user", "case").prefetch_related("responses")


class InquiryManager(models.Manager.from_queryset(InquiryQuerySet)):  # type: ignore[misc]
    pass


# -------------------------- Models -------------------------- #

class Inquiry(models.Model):
    """
    A contact request, either to one company or (company is null) to the
    platform operator. Requester fields are plain strings captured at
    submission; `customer` links the account when the requester was
    logged in.
    """
    company = models.ForeignKey(
        "companies.Company",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="inquiries",
    )
    customer = models.ForeignKey(
        "accounts.Customer",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="inquiries",
    )
    case = models.ForeignKey(
        "companies.ConstructionCase",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="inquiries",
    )

    inquirer_name = models.CharField(max_length=120)
    inquirer_email = models.EmailField()
    inquirer_phone = models.CharField(max_length=50, blank=True, default="")
    message = models.TextField()

    status = models.CharField(
        max_length=20,
        choices=InquiryStatus.choices,
        default=InquiryStatus.NEW,
        db_index=True,
    )
    # staff-only; never serialized for the requester
    internal_notes = models.TextField(blank=True, default="")
    responded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects: InquiryManager = InquiryManager()

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "inquiries"
        indexes = [
            models.Index(fields=["company", "status", "-created_at"], name="inquiry_company_status_idx"),
            models.Index(fields=["customer", "-created_at"], name="inquiry_customer_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                name="inquiry_case_requires_company",
                condition=Q(case__isnull=True) | Q(company__isnull=False),
            ),
        ]

    def __str__(self) -> str:
        target = self.company.name if self.company_id else "general"
        return f"Inquiry #{self.pk} from {self.inquirer_name} → {target}"

    @property
    def is_general(self) -> bool:
        return self.company_id is None


class InquiryResponse(models.Model):
    """One entry of an inquiry's append-only thread."""
    inquiry = models.ForeignKey(Inquiry, on_delete=models.CASCADE, related_name="responses")
    sender = models.CharField(max_length=10, choices=ResponseSender.choices)
    # snapshot of the sender's name when written; not a live join
    sender_name = models.CharField(max_length=150)
    message = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [models.Index(fields=["inquiry", "created_at"], name="inquiry_resp_thread_idx")]

    def __str__(self) -> str:
        return f"{self.sender} reply on #{self.inquiry_id} by {self.sender_name}"

    @property
    def is_staff_reply(self) -> bool:
        return self.sender in STAFF_SENDERS
