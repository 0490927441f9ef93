from django.contrib import admin

from .models import Inquiry, InquiryResponse


class InquiryResponseInline(admin.TabularInline):
    model = InquiryResponse
    extra = 0
    fields = ("created_at", "sender", "sender_name", "message")
    readonly_fields = ("created_at",)
    ordering = ("created_at", "id")


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ("id", "inquirer_name", "inquirer_email", "company", "status", "responded_at", "created_at")
    list_filter = ("status", "company", "created_at")
    search_fields = ("inquirer_name", "inquirer_email", "message", "company__name")
    list_select_related = ("company",)
    raw_id_fields = ("customer", "case")
    readonly_fields = ("responded_at", "created_at", "updated_at")
    inlines = [InquiryResponseInline]
