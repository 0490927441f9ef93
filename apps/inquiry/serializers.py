# apps/inquiry/serializers.py
from rest_framework import serializers

from apps.accounts.models import Customer
from apps.companies.models import Company, ConstructionCase

from .models import Inquiry, InquiryResponse


# ---- nested summaries ----

class CompanySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ["id", "name", "prefecture", "city", "phone_number", "email", "website_url", "logo_url"]


class CaseSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = ConstructionCase
        fields = ["id", "title"]


class CustomerSummarySerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Customer
        fields = ["id", "last_name", "first_name", "email", "phone_number"]


class InquiryResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = InquiryResponse
        fields = ["id", "sender", "sender_name", "message", "created_at"]
        read_only_fields = fields


# ---- inquiry payloads (read) ----

class _InquiryBaseSerializer(serializers.ModelSerializer):
    company = CompanySummarySerializer(read_only=True)
    case = CaseSummarySerializer(read_only=True)
    responses = InquiryResponseSerializer(many=True, read_only=True)
    response_count = serializers.SerializerMethodField()

    requester_fields = [
        "id", "company", "case",
        "inquirer_name", "inquirer_email", "inquirer_phone",
        "message", "status", "responded_at",
        "created_at", "updated_at",
        "response_count", "responses",
    ]

    def get_response_count(self, obj) -> int:
        # responses are prefetched by services.list_inquiries/get_inquiry
        return len(obj.responses.all())


class CustomerInquirySerializer(_InquiryBaseSerializer):
    """Requester view: never carries internal_notes."""

    class Meta:
        model = Inquiry
        fields = _InquiryBaseSerializer.requester_fields
        read_only_fields = fields


class StaffInquirySerializer(_InquiryBaseSerializer):
    """Admin/member view: adds the customer link and internal notes."""
    customer = CustomerSummarySerializer(read_only=True)

    class Meta:
        model = Inquiry
        fields = _InquiryBaseSerializer.requester_fields + ["customer", "internal_notes"]
        read_only_fields = fields


# ---- request bodies (write) ----
# Validation of content lives in services; these only shape the input.

class InquirySubmitSerializer(serializers.Serializer):
    inquirer_name = serializers.CharField(required=False, allow_blank=True, max_length=120, default="")
    inquirer_email = serializers.CharField(required=False, allow_blank=True, max_length=254, default="")
    inquirer_phone = serializers.CharField(required=False, allow_blank=True, max_length=50, default="")
    message = serializers.CharField(required=False, allow_blank=True, default="")
    company_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    case_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class InquiryCreatedSerializer(serializers.ModelSerializer):
    company = CompanySummarySerializer(read_only=True)

    class Meta:
        model = Inquiry
        fields = ["id", "status", "company", "case", "inquirer_name", "inquirer_email", "created_at"]
        read_only_fields = fields


class InquiryUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    internal_notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Send `status` and/or `internal_notes`.")
        return attrs


class ReplySerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="")
    sender = serializers.CharField(required=False, allow_blank=True)


class StatusSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    new = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    resolved = serializers.IntegerField()
    closed = serializers.IntegerField()
    this_month = serializers.IntegerField()
