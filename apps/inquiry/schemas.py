# apps/inquiry/schemas.py
# Swagger/OpenAPI examples & inline serializers for the inquiry endpoints,
# so /api/docs shows prefilled requests and typed responses.
from drf_spectacular.utils import OpenApiExample, inline_serializer
from rest_framework import serializers

from .serializers import InquiryResponseSerializer, StaffInquirySerializer

# ---- error shapes ----

DomainErrorResponse = inline_serializer(
    name="InquiryDomainError",
    fields={
        "detail": serializers.CharField(),
        "field": serializers.CharField(required=False),
    },
)

SignupRequiredResponse = inline_serializer(
    name="InquirySignupRequired401",
    fields={
        "detail": serializers.CharField(),
        "signup_url": serializers.CharField(),
    },
)

# ---- form context ----

InquiryFormResponse = inline_serializer(
    name="InquiryFormContext",
    fields={
        "company": inline_serializer(
            name="InquiryFormCompany",
            fields={"id": serializers.IntegerField(), "name": serializers.CharField()},
            allow_null=True,
        ),
        "case": inline_serializer(
            name="InquiryFormCase",
            fields={"id": serializers.IntegerField(), "title": serializers.CharField()},
            allow_null=True,
        ),
        "prefill": inline_serializer(
            name="InquiryPrefill",
            fields={
                "name": serializers.CharField(allow_blank=True),
                "email": serializers.CharField(allow_blank=True),
                "phone": serializers.CharField(allow_blank=True),
                "locked": serializers.BooleanField(),
            },
        ),
    },
)

# ---- reply ----

ReplyCreatedResponse = inline_serializer(
    name="InquiryReplyCreated",
    fields={
        "response": InquiryResponseSerializer(),
        "inquiry": StaffInquirySerializer(),
    },
)

# ---- request body examples (prefilled) ----

SubmitGeneralInquiryExample = OpenApiExample(
    "General inquiry (anonymous)",
    value={
        "inquirer_name": "山田太郎",
        "inquirer_email": "yamada@example.com",
        "inquirer_phone": "090-1234-5678",
        "message": "見積もりをお願いします",
    },
    description="No company: addressed to the platform operator; no login needed.",
)

SubmitCompanyInquiryExample = OpenApiExample(
    "Company inquiry (logged-in customer)",
    value={
        "company_id": 7,
        "case_id": 3,
        "message": "平屋の住宅を検討しています。見学会の予定はありますでしょうか？",
    },
    description="Requester name/email/phone are taken from the customer profile.",
)

StatusUpdateExample = OpenApiExample(
    "Move to in progress and keep a note",
    value={"status": "IN_PROGRESS", "internal_notes": "要再確認"},
)

ReplyExample = OpenApiExample(
    "Reply",
    value={"message": "ご連絡ありがとうございます"},
)
